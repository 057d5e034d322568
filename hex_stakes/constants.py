"""Constants and configuration for HEX stake tracking."""

from datetime import datetime, timezone
from decimal import Decimal

# The HEX contract is deployed at the same address on Ethereum and on PulseChain (forked state).
HEX_CONTRACT_ADDRESS = "0x2b591e99afE9f32eAa6214f7B7629768c40Eeb39"

# Minimal ABI for HEX - only the view functions the tracker needs.
# Source: HEX.sol verified on Etherscan.
HEX_MIN_ABI: list[dict] = [
    {
        "type": "function",
        "name": "currentDay",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "stakeCount",
        "stateMutability": "view",
        "inputs": [{"name": "stakerAddr", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
    {
        "type": "function",
        "name": "stakeLists",
        "stateMutability": "view",
        "inputs": [
            {"name": "", "type": "address"},
            {"name": "", "type": "uint256"},
        ],
        "outputs": [
            {"name": "stakeId", "type": "uint40"},  # 0
            {"name": "stakedHearts", "type": "uint72"},  # 1
            {"name": "stakeShares", "type": "uint72"},  # 2
            {"name": "lockedDay", "type": "uint16"},  # 3
            {"name": "stakedDays", "type": "uint16"},  # 4
            {"name": "unlockedDay", "type": "uint16"},  # 5
            {"name": "isAutoStake", "type": "bool"},  # 6
        ],
    },
    {
        "type": "function",
        "name": "dailyDataRange",
        "stateMutability": "view",
        "inputs": [
            {"name": "beginDay", "type": "uint256"},
            {"name": "endDay", "type": "uint256"},
        ],
        "outputs": [{"name": "list", "type": "uint256[]"}],
    },
    {
        "type": "function",
        "name": "globalInfo",
        "stateMutability": "view",
        "inputs": [],
        "outputs": [{"name": "", "type": "uint256[13]"}],
    },
    {
        "type": "function",
        "name": "balanceOf",
        "stateMutability": "view",
        "inputs": [{"name": "account", "type": "address"}],
        "outputs": [{"name": "", "type": "uint256"}],
    },
]

# Public endpoints used when neither --rpc-url nor the chain's env var is set.
DEFAULT_PUBLIC_ETH_RPC_URLS = (
    "https://eth.llamarpc.com",
    "https://ethereum.publicnode.com",
)
DEFAULT_PUBLIC_PULSECHAIN_RPC_URLS = (
    "https://rpc.pulsechain.com",
    "https://pulsechain-rpc.publicnode.com",
)

# Packed dailyData lanes: payoutTotal (uint72) | stakeSharesTotal (uint72) | unclaimedSatoshisTotal (uint56).
HEARTS_UINT_SHIFT = 72
HEARTS_MASK = (1 << HEARTS_UINT_SHIFT) - 1
SATS_UINT_SIZE = 56
SATS_MASK = (1 << SATS_UINT_SIZE) - 1

UINT256_MAX = (1 << 256) - 1

HEARTS_PER_HEX = 10**8
HEARTS_PER_SATOSHI = 10**4
HEX_DECIMALS = Decimal(HEARTS_PER_HEX)

# Stake penalty parameters (HEX.sol: LATE_PENALTY_GRACE_DAYS, EARLY_PENALTY_MIN_DAYS).
GRACE_PERIOD = 14
EARLY_PENALTY_MIN_DAYS = 90

# Claim phase ends on day 351; the Big Pay Day is paid out on the day after.
CLAIM_PHASE_END_DAY = 351
BIG_PAY_DAY = CLAIM_PHASE_END_DAY + 1
CLAIMABLE_BTC_ADDR_COUNT = 27_997_742
CLAIMABLE_SATOSHIS_TOTAL = 910_087_996_911_001

# Day 0 of the protocol (HEX.sol LAUNCH_TIME = 1575331200).
HEX_START_DATE = datetime(2019, 12, 3, tzinfo=timezone.utc)
SECONDS_PER_DAY = 86_400
DAYS_PER_YEAR = 365

# Interest windows (in days) reported next to the lifetime total.
DAILY_WINDOW_DAYS = 1
SEVEN_DAY_WINDOW_DAYS = 7
MONTHLY_WINDOW_DAYS = 30

# dailyDataRange is read in chunks to keep eth_call payloads small.
DAILY_DATA_CHUNK_DAYS = 500

# Price feed (HEX/USDC trades on Uniswap, aggregated by Bitquery).
BITQUERY_URL = "https://graphql.bitquery.io/"
USDC_ADDRESS = "0xa0b86991c6218b36c1d19d4a2e9eb0ce3606eb48"
PRICE_HISTORY_SINCE = "2021-10-23"
PRICE_CANDLE_MINUTES = 5
PRICE_HISTORY_LIMIT = 1000

# Cache configuration
CACHE_DIR_NAME = ".hex_stakes_cache"
CACHE_VERSION = "1"  # Increment to invalidate all caches
