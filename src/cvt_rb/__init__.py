# Copyright (c) 2024 S. Holzapfel <me@sebholzapfel.com>
#
# SPDX-License-Identifier: BSD-3-Clause

"""CVT Reduced Blanking (v2/v3) video timing calculator."""

from .calc      import CVTTiming, compute
from .constants import CONSTANTS, CVTConstants
from .errors    import CVTError, InvalidParameter, InvalidVersion, MissingParameter
from .modeline  import DVIModeline
from .params    import UNSPECIFIED, CVTParameters
from .types     import RBVersion
