"""
Global constants for the WDBX codec.
Contains path configuration, format signatures and on-disk layout constants.
"""

import os

# **************************************************************** #
#                       Build Info                                     #
# **************************************************************** #
APP_VERSION = "0.3.0"

# **************************************************************** #
#                       Environment Detection                        #
# **************************************************************** #
DEV_MODE = os.getenv("DEV_MODE", "false").lower() == "true"

SCRIPT_DIR = os.path.dirname(os.path.abspath(__file__))

# **************************************************************** #
#                       Path Configuration                           #
# **************************************************************** #
if DEV_MODE:
    TEMP_LOG_DIR = os.path.join(SCRIPT_DIR, "..", "..", "workdir")
    DEFAULT_CONFIG_FILE = os.path.join(SCRIPT_DIR, "..", "..", "workdir", "config.json")
else:
    TEMP_LOG_DIR = os.path.join(os.path.expanduser("~"), ".wdbx")
    DEFAULT_CONFIG_FILE = os.path.join(TEMP_LOG_DIR, "config.json")

CONFIG_FILE = os.getenv("WDBX_CONFIG", DEFAULT_CONFIG_FILE)

# **************************************************************** #
#                       Format Signatures                            #
# **************************************************************** #
# Normalised signatures; files written with the other byte order are
# reversed before lookup.
SIGNATURE_LEADING_MARKER = ord("W")
SIGNATURE_SIZE = 4

SIG_WDBC = "WDBC"
SIG_WDB2 = "WDB2"
SIG_WCH2 = "WCH2"  # client cache flavour of WDB2
SIG_WDB5 = "WDB5"

# **************************************************************** #
#                       Header Layout                                #
# **************************************************************** #
WDBC_HEADER_SIZE = 20
WDB2_HEADER_SIZE = 48
WDB5_HEADER_SIZE = 48

# Position of the string block size field, shared by every variant.
# Offset-table files reuse it for the absolute offset map position.
STRING_TABLE_OFFSET = 16

# WDB5 flags
WDB5_FLAG_OFFSET_MAP = 0x01
WDB5_FLAG_SECOND_INDEX = 0x02
WDB5_FLAG_INDEX_TABLE = 0x04

INDEX_ENTRY_SIZE = 4
COPY_TABLE_ENTRY_SIZE = 8

# **************************************************************** #
#                       Decoding Defaults                            #
# **************************************************************** #
STRING_NOT_FOUND = "String not found"
DEFAULT_ENCODING = "utf-8"
