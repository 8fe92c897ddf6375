"""
Shared constants for the PokeCubed modpack installer.
"""

INSTALLER_VERSION = "1.0.31"

# Remote documents
MANIFEST_URL = "https://moreno.land/dl/mpack/pokecubedinstaller.json"
SNAPSHOT_URL = "https://moreno.land/dl/mpack/file_info.php"
UPDATER_URL = "https://moreno.land/dl/mpack/jar/PokeCubedUpdater.jar"

# Self-update file names (placed next to the running package)
UPDATER_FILENAME = "PokeCubedUpdater.jar"
NEW_PACKAGE_FILENAME = "PokeCubedInstaller-new.jar"

LOG_FILENAME = "PokeCubedInstaller.log"

# User-maintained list of files cleanup must never delete (at the target root)
PROTECT_LIST_FILENAME = "dontdelete.txt"

# Profiles gate which core files apply
DEFAULT_PROFILE = "tlauncher"
PROFILE_ANY = "both"
TLAUNCHER_VERSION_DIR = "PokeCubed"

# Category roots under the target directory
MODS_DIR = "mods"
CONFIG_DIR = "config"
RESOURCEPACKS_DIR = "resourcepacks"
SHADERPACKS_DIR = "shaderpacks"
FABRIC_DIR = ".fabric"
DATA_DIR = "data"
NATIVES_DIR = "natives"

# Manifest list name -> category root, in processing order
CATEGORY_LISTS = (
    ("config_files", CONFIG_DIR),
    ("resource_packs", RESOURCEPACKS_DIR),
    ("shader_packs", SHADERPACKS_DIR),
    ("fabric_files", FABRIC_DIR),
    ("data_files", DATA_DIR),
    ("native_files", NATIVES_DIR),
)

# Subtrees cleanup is allowed to prune
MANAGED_DIRS = (MODS_DIR, CONFIG_DIR)

# HTTP
CONNECT_TIMEOUT = 30
READ_TIMEOUT = 60
MAX_ATTEMPTS = 3
BACKOFF_STEP = 2.0  # seconds added per retry (0s, 2s, 4s)
CHUNK_SIZE = 8192

REQUEST_HEADERS = {
    "User-Agent": "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36",
    "Accept": "*/*",
    "Accept-Language": "en-US,en;q=0.9",
    "Accept-Encoding": "identity",  # Content-Length must match the bytes written
    "Connection": "keep-alive",
}
