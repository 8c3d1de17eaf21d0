import sys

from ima2dicom.cli import main

sys.exit(main())
