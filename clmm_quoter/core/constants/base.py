# Fixed-point widths of the pool contracts
RESOLUTION = 96
Q96 = 1 << RESOLUTION

MAX_UINT128 = (1 << 128) - 1
MAX_UINT160 = (1 << 160) - 1
MAX_UINT256 = (1 << 256) - 1
MAX_INT128 = (1 << 127) - 1
MIN_INT128 = -(1 << 127)

# Tick range and the sqrt prices at its ends
MIN_TICK = -887272
MAX_TICK = 887272
MIN_SQRT_RATIO = 4295128739
MAX_SQRT_RATIO = 1461446703485210103287273052203988822378723970342

# Fees are expressed in hundredths of a basis point
FEE_PIPS_DENOMINATOR = 1_000_000

DEFAULT_MAX_STEPS = 10_000
DEFAULT_BITMAP_WORD_RADIUS = 2
