"""Application-wide constants."""

APP_NAME = "LayerMint"
APP_VERSION = "0.1.0"
ORG_NAME = "LayerMint"
ORG_DOMAIN = "layermint.org"

# Canvas defaults
DEFAULT_CANVAS_WIDTH = 600
DEFAULT_CANVAS_HEIGHT = 600

# Batch defaults
DEFAULT_BATCH_SIZE = 100

# Rarity bounds (percentage); a layer at MAX_RARITY is always used
MIN_RARITY = 0
MAX_RARITY = 100

# Collection defaults
DEFAULT_COLLECTION_NAME = "My collection"
DEFAULT_DESCRIPTION = "NFT Art"
DEFAULT_ARCHIVE_STEM = "nft-collection"
GENERIC_ITEM_STEM = "nft"
COPIES_PER_ITEM = 1

# Combination keys
SKIP_MARKER = "-"
USED_SEPARATOR = ":"

# Consecutive collisions tolerated before switching to exhaustive enumeration
SAMPLING_RETRY_BUDGET = 1_000
# Largest combination space the enumeration fallback will materialise
ENUMERATION_LIMIT = 1_000_000

# Archive layout
IMAGE_FOLDER = "nfts"
METADATA_FILENAME = "metadata.csv"
METADATA_DELIMITER = ";"
METADATA_FIXED_COLUMNS = ("Filename", "Title", "Description", "NbCopies")
NONE_TOKEN = "None"
ARCHIVE_EXTENSION = ".zip"

# Uploads
ACCEPTED_IMAGE_SUFFIXES = (".png",)
UPLOAD_SIZE_GUIDANCE = 5 * 1024 * 1024

# Layer overview placeholder
EMPTY_PREVIEW_TEXT = "No layers to preview"
EMPTY_PREVIEW_BG_COLOR = "#000000"
EMPTY_PREVIEW_TEXT_COLOR = "#80FFFFFF"
EMPTY_PREVIEW_FONT_SIZE = 24

# Download gating
AUTHORIZATION_MESSAGE = "Downloading requires payment. Proceed to payment?"
