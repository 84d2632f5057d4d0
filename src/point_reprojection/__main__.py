import sys

from point_reprojection.cli import main

sys.exit(main())
