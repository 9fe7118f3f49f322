import sys

from shellstatus import *

# Host-level configuration read by the fault and help renderers.
__prog__ = "status"
__styles__ = {}


if __name__ == '__main__':
    sys.exit(main())
