import tarfile


# Header magic (8 bytes at offset 257 of a header block)
USTAR_MAGIC = tarfile.POSIX_MAGIC   # b"ustar\x0000"
GNU_MAGIC = tarfile.GNU_MAGIC       # b"ustar  \x00"
MAGIC_SLICE = slice(257, 265)

# GNU header extension: atime[12] ctime[12], stored where ustar keeps its name prefix
USTAR_PREFIX_SLICE = slice(345, 500)
GNU_ATIME_SLICE = slice(345, 357)
GNU_CTIME_SLICE = slice(357, 369)


# Raw type codes
TYPE_REG = tarfile.REGTYPE              # b"0"
TYPE_REG_LEGACY = tarfile.AREGTYPE      # b"\0"
TYPE_LINK = tarfile.LNKTYPE             # b"1"
TYPE_SYMLINK = tarfile.SYMTYPE          # b"2"
TYPE_CHAR = tarfile.CHRTYPE             # b"3"
TYPE_BLOCK = tarfile.BLKTYPE            # b"4"
TYPE_DIR = tarfile.DIRTYPE              # b"5"
TYPE_FIFO = tarfile.FIFOTYPE            # b"6"
TYPE_CONT = tarfile.CONTTYPE            # b"7"
TYPE_XHEADER = tarfile.XHDTYPE          # b"x"
TYPE_XGLOBAL = tarfile.XGLTYPE          # b"g"
TYPE_GNU_SPARSE = tarfile.GNUTYPE_SPARSE      # b"S"
TYPE_GNU_LONGNAME = tarfile.GNUTYPE_LONGNAME  # b"L"
TYPE_GNU_LONGLINK = tarfile.GNUTYPE_LONGLINK  # b"K"


# Compressed input detection
ZSTD_MAGIC = b"\x28\xb5\x2f\xfd"
SNIFF_LEN = 4


# Stream decoding
STREAM_BUFSIZE = 64 * 1024
NAME_ENCODING = "utf-8"
NAME_ERRORS = "surrogateescape"
