# Archive signature (RAR 1.5 - 4.x marker block)
RAR4_MAGIC = bytes([0x52, 0x61, 0x72, 0x21, 0x1A, 0x07, 0x00])  # "Rar!\x1a\x07\x00"
RAR5_MAGIC = bytes([0x52, 0x61, 0x72, 0x21, 0x1A, 0x07, 0x01, 0x00])  # "Rar!\x1a\x07\x01\x00"

# Common block header: crc u16 | type u8 | flags u16 | size u16
BLOCK_HEADER_SIZE = 7

# Block type tags
BLOCK_MAIN = 0x73
BLOCK_FILE = 0x74
BLOCK_END = 0x7B

# Fixed part of a file header body following the common header:
# pack_size u32 | unp_size u32 | host_os u8 | file_crc u32 | ftime u32 |
# unp_ver u8 | method u8 | name_size u16 | attr u32
FILE_HEAD_FIXED_SIZE = 25

# File attribute bits
ATTR_DIRECTORY = 0x10

PATH_SEPARATOR = "/"

# Names are stored one byte per character
DEFAULT_NAME_ENCODING = "latin-1"

FORMAT_RAR4 = "rar4"
FORMAT_RAR5 = "rar5"

# Extensions picked up when scanning directories
ARCHIVE_EXTENSIONS = (".rar", ".cbr")
