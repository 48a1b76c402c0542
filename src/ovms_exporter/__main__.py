import sys

from ovms_exporter.cli import main

sys.exit(main())
