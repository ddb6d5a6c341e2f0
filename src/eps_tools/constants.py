"""Fixed constants: DSC conformance levels, document defaults, encoding limits.

From Adobe's EPSF 3.0 and DSC 3.0 specifications.
"""

__version__ = '1.0.0'

# Conformance levels written into the identification comment
DSC_CONFORMANCE_LEVEL = '3.0'
EPSF_CONFORMANCE_LEVEL = '3.0'
EPS_IDENTIFICATION_COMMENT = f'%!PS-Adobe-{DSC_CONFORMANCE_LEVEL} EPSF-{EPSF_CONFORMANCE_LEVEL}'
LANGUAGE_LEVEL = 2

# Document defaults (used when the caller passes an empty title or creator)
DEFAULT_TITLE = 'The EPS Document'
DEFAULT_CREATOR = f'eps_tools {__version__}'

# Raster encoding: all samples are 8 bits, written as two hex digits.
BITS_PER_SAMPLE = 8
# Soft wrap for hex sample lines; the hard DSC line limit is 255.
HEX_LINE_WIDTH = 64
MAX_LINE_LENGTH = 255

# Default BasicStroke values (width in points)
DEFAULT_LINE_WIDTH = 1.0
DEFAULT_MITER_LIMIT = 10.0
MIN_MITER_LIMIT = 1.0

# Default font for literal text mode
DEFAULT_FONT_NAME = 'Helvetica'
DEFAULT_FONT_SIZE = 12.0

# Luminance weights (ITU-R BT.601) for grayscale and bitmap conversion
LUMA_RED = 0.299
LUMA_GREEN = 0.587
LUMA_BLUE = 0.114
# Gray sample at or above which a bitmap pixel is white
BITMAP_THRESHOLD = 128

# Brighter/darker scale factor for 3D rectangles
COLOR_SHADE_FACTOR = 0.7

# Number of line segments per curve when flattening for clip-area geometry
CURVE_FLATTEN_STEPS = 16
