"""Import paths of the Go standard library packages."""

from __future__ import annotations

import posixpath

__all__ = ["STANDARD_PACKAGES", "standard_package_names"]

# Each line is either a run of top-level packages, or "root: children" where
# "." stands for the root package itself and children are relative to it.
_PACKAGE_TREE = """
archive: tar zip
bufio builtin bytes
compress: bzip2 flate gzip lzw zlib
container: heap list ring
context
crypto: . aes cipher des dsa ecdsa elliptic hmac md5 rand rc4 rsa sha1 sha256 sha512 subtle tls x509 x509/pkix
database: sql sql/driver
debug: dwarf elf gosym macho pe plan9obj
encoding: . ascii85 asn1 base32 base64 binary csv gob hex json pem xml
errors expvar flag fmt
go: ast build constant doc format importer parser printer scanner token types
hash: . adler32 crc32 crc64 fnv
html: . template
image: . color color/palette draw gif jpeg png
index: suffixarray
io: . ioutil
log: . syslog
math: . big cmplx rand
mime: . multipart quotedprintable
net: . http http/cgi http/cookiejar http/fcgi http/httptest http/httptrace http/httputil http/pprof mail rpc rpc/jsonrpc smtp textproto url
os: . exec signal user
path: . filepath
plugin reflect
regexp: . syntax
runtime: . cgo debug pprof race trace
sort strconv strings
sync: . atomic
syscall
testing: . iotest quick
text: scanner tabwriter template template/parse
time
unicode: . utf16 utf8
unsafe
"""


def _expand(tree: str) -> tuple[str, ...]:
    paths: list[str] = []
    for line in tree.strip().splitlines():
        root, sep, rest = line.partition(":")
        if not sep:
            paths.extend(line.split())
            continue
        root = root.strip()
        paths.extend(root if child == "." else f"{root}/{child}" for child in rest.split())
    return tuple(paths)


STANDARD_PACKAGES: tuple[str, ...] = _expand(_PACKAGE_TREE)


def standard_package_names() -> dict[str, str]:
    """Map each standard import path to its package name, the last path element."""
    return {path: posixpath.basename(path) for path in STANDARD_PACKAGES}