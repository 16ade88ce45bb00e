"""
Shortcut ID Calculation

Steam names the screenshot folder of a non-Steam shortcut after a 64-bit
"Big Picture" id derived from the shortcut's executable and display name.

The checksum is the reflected CRC-32 (poly 0x04C11DB7, init and final XOR
0xFFFFFFFF), which is what binascii.crc32 computes. The high bit of the
checksum is set, it becomes the top half of the id, and the bottom half is
the constant 0x02000000.
"""

import binascii

SHORTCUT_ID_HIGH_BIT = 0x80000000
SHORTCUT_ID_LOW_WORD = 0x02000000

# Mask that recovers a shortcut's legacy screenshot folder id from its appid field
SHORTCUT_APPID_MASK = 0x7FFFFF


def shortcut_identity(executable_path: str, display_name: str) -> int:
    """
    Compute the Big Picture shortcut id for an executable path + display name.

    Examples:
        >>> shortcut_identity('"/Applications/Second Life Viewer.app"', "Second Life")
        18291777663678808064
    """
    key = f"{executable_path}{display_name}"
    crc = binascii.crc32(key.encode('utf-8')) & 0xFFFFFFFF
    top_32 = crc | SHORTCUT_ID_HIGH_BIT
    return (top_32 << 32) | SHORTCUT_ID_LOW_WORD
