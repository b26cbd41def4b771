"""
Hash signature table.

Each signature pairs a full-match regex with static metadata. Table order
breaks ties between signatures that score the same.
"""

import re
from dataclasses import dataclass, field

from cipherscope.models.schemas import HashCharset, HashStrength


@dataclass(frozen=True)
class HashSignature:
    """Shape and metadata of one hash format."""

    name: str
    pattern: re.Pattern[str]
    length: int | None  # None for variable-length formats
    charset: HashCharset
    strength: HashStrength
    algorithm: str
    output_size: int | None
    vulnerabilities: tuple[str, ...] = field(default_factory=tuple)
    uses: tuple[str, ...] = field(default_factory=tuple)

    def matches(self, text: str) -> bool:
        if self.length is not None and len(text) != self.length:
            return False
        return self.pattern.match(text) is not None


def _hex(name: str, length: int, strength: HashStrength, output_size: int,
         vulnerabilities: tuple[str, ...] = (), uses: tuple[str, ...] = (),
         algorithm: str | None = None) -> HashSignature:
    return HashSignature(
        name=name,
        pattern=re.compile(rf"^[a-fA-F0-9]{{{length}}}$"),
        length=length,
        charset=HashCharset.HEX,
        strength=strength,
        algorithm=algorithm or name,
        output_size=output_size,
        vulnerabilities=vulnerabilities,
        uses=uses,
    )


WEAK = HashStrength.WEAK
MODERATE = HashStrength.MODERATE
STRONG = HashStrength.STRONG
VERY_STRONG = HashStrength.VERY_STRONG

_MCF_B64 = r"[A-Za-z0-9./+]"


SIGNATURES: tuple[HashSignature, ...] = (
    # MD family
    _hex("MD5", 32, WEAK, 128,
         ("collision attacks", "birthday attacks", "rainbow tables"),
         ("legacy systems", "file checksums", "non-cryptographic uses")),
    _hex("MD4", 32, WEAK, 128,
         ("practical collisions", "preimage weaknesses"),
         ("legacy protocols", "NTLM internals")),
    _hex("MD2", 32, WEAK, 128,
         ("preimage attacks", "very slow"),
         ("legacy PKI certificates",)),

    # SHA-1
    _hex("SHA-1", 40, WEAK, 160,
         ("collision attacks", "chosen-prefix attacks"),
         ("legacy systems", "git commits", "deprecated SSL certificates")),

    # SHA-2 family
    _hex("SHA-224", 56, STRONG, 224, (), ("digital signatures", "data integrity")),
    _hex("SHA-256", 64, STRONG, 256, (),
         ("blockchain", "digital signatures", "SSL certificates", "password hashing")),
    _hex("SHA-384", 96, VERY_STRONG, 384, (), ("high-security applications", "digital signatures")),
    _hex("SHA-512", 128, VERY_STRONG, 512, (), ("high-security applications", "cryptographic protocols")),
    _hex("SHA-512/256", 64, STRONG, 256, (), ("truncated SHA-512 on 64-bit platforms",)),

    # SHA-3 and Keccak
    _hex("SHA3-224", 56, VERY_STRONG, 224, (), ("modern cryptography", "post-quantum security")),
    _hex("SHA3-256", 64, VERY_STRONG, 256, (), ("modern cryptography", "blockchain")),
    _hex("SHA3-384", 96, VERY_STRONG, 384, (), ("high-security applications",)),
    _hex("SHA3-512", 128, VERY_STRONG, 512, (), ("maximum security applications",)),
    _hex("Keccak-256", 64, VERY_STRONG, 256, (), ("Ethereum addresses", "smart contracts")),

    # BLAKE family
    _hex("BLAKE2b-256", 64, VERY_STRONG, 256, (), ("high-performance hashing", "cryptocurrency")),
    _hex("BLAKE2b-512", 128, VERY_STRONG, 512, (), ("high-performance hashing", "file integrity")),
    _hex("BLAKE2s-256", 64, VERY_STRONG, 256, (), ("embedded systems", "high-performance hashing")),
    _hex("BLAKE3", 64, VERY_STRONG, 256, (), ("modern high-performance hashing", "merkle trees")),

    # Whirlpool
    _hex("Whirlpool", 128, STRONG, 512, (), ("cryptographic protocols", "digital forensics")),

    # RIPEMD family
    _hex("RIPEMD-128", 32, MODERATE, 128, ("shorter hash length",), ("legacy systems", "academic research")),
    _hex("RIPEMD-160", 40, MODERATE, 160, (), ("cryptocurrency", "digital signatures")),
    _hex("RIPEMD-256", 64, STRONG, 256, (), ("cryptographic applications",)),
    _hex("RIPEMD-320", 80, STRONG, 320, (), ("high-security applications",)),

    # Password hashing
    HashSignature(
        name="bcrypt",
        pattern=re.compile(r"^\$2[abxy]?\$[0-9]{2}\$[A-Za-z0-9./]{53}$"),
        length=None,
        charset=HashCharset.BASE64_VARIANT,
        strength=VERY_STRONG,
        algorithm="bcrypt",
        output_size=184,
        uses=("password hashing", "user authentication"),
    ),
    HashSignature(
        name="scrypt",
        pattern=re.compile(rf"^\$s[0-9]\$[0-9a-f]+\${_MCF_B64}+$"),
        length=None,
        charset=HashCharset.BASE64,
        strength=VERY_STRONG,
        algorithm="scrypt",
        output_size=None,
        uses=("password hashing", "key derivation", "cryptocurrency"),
    ),
    HashSignature(
        name="yescrypt",
        pattern=re.compile(r"^\$y\$[./A-Za-z0-9]+\$[./A-Za-z0-9]*\$[./A-Za-z0-9]{43}$"),
        length=None,
        charset=HashCharset.BASE64_VARIANT,
        strength=VERY_STRONG,
        algorithm="yescrypt",
        output_size=256,
        uses=("modern Linux password hashing",),
    ),
    HashSignature(
        name="Argon2id",
        pattern=re.compile(rf"^\$argon2id\$v=[0-9]+\$m=[0-9]+,t=[0-9]+,p=[0-9]+\${_MCF_B64}+\${_MCF_B64}+$"),
        length=None,
        charset=HashCharset.BASE64,
        strength=VERY_STRONG,
        algorithm="Argon2id",
        output_size=None,
        uses=("modern password hashing", "key derivation"),
    ),
    HashSignature(
        name="Argon2i",
        pattern=re.compile(rf"^\$argon2i\$v=[0-9]+\$m=[0-9]+,t=[0-9]+,p=[0-9]+\${_MCF_B64}+\${_MCF_B64}+$"),
        length=None,
        charset=HashCharset.BASE64,
        strength=VERY_STRONG,
        algorithm="Argon2i",
        output_size=None,
        uses=("side-channel resistant hashing",),
    ),
    HashSignature(
        name="Argon2d",
        pattern=re.compile(rf"^\$argon2d\$v=[0-9]+\$m=[0-9]+,t=[0-9]+,p=[0-9]+\${_MCF_B64}+\${_MCF_B64}+$"),
        length=None,
        charset=HashCharset.BASE64,
        strength=VERY_STRONG,
        algorithm="Argon2d",
        output_size=None,
        uses=("GPU-resistant hashing",),
    ),
    HashSignature(
        name="PBKDF2-SHA1",
        pattern=re.compile(rf"^\$pbkdf2\$[0-9]+\${_MCF_B64}+\${_MCF_B64}+$"),
        length=None,
        charset=HashCharset.BASE64,
        strength=MODERATE,
        algorithm="PBKDF2-SHA1",
        output_size=None,
        vulnerabilities=("SHA-1 base",),
        uses=("legacy password hashing",),
    ),
    HashSignature(
        name="PBKDF2-SHA256",
        pattern=re.compile(rf"^\$pbkdf2-sha256\$[0-9]+\${_MCF_B64}+\${_MCF_B64}+$"),
        length=None,
        charset=HashCharset.BASE64,
        strength=STRONG,
        algorithm="PBKDF2-SHA256",
        output_size=None,
        uses=("password hashing", "key derivation"),
    ),
    HashSignature(
        name="PBKDF2-SHA512",
        pattern=re.compile(rf"^\$pbkdf2-sha512\$[0-9]+\${_MCF_B64}+\${_MCF_B64}+$"),
        length=None,
        charset=HashCharset.BASE64,
        strength=STRONG,
        algorithm="PBKDF2-SHA512",
        output_size=None,
        uses=("secure password hashing",),
    ),
    HashSignature(
        name="Django-PBKDF2-SHA256",
        pattern=re.compile(r"^pbkdf2_sha256\$[0-9]+\$[A-Za-z0-9]+\$[A-Za-z0-9+/]+=*$"),
        length=None,
        charset=HashCharset.BASE64,
        strength=STRONG,
        algorithm="PBKDF2-SHA256",
        output_size=256,
        uses=("Django user passwords",),
    ),

    # Checksums
    _hex("CRC32", 8, WEAK, 32,
         ("not cryptographically secure", "collision prone"),
         ("error detection", "file integrity checks")),
    _hex("Adler32", 8, WEAK, 32, ("weak collision resistance",), ("compression algorithms", "quick checksums")),
    _hex("FNV-1a-32", 8, WEAK, 32, ("not cryptographically secure",), ("hash tables", "quick lookups")),
    _hex("CRC64", 16, WEAK, 64, ("not cryptographically secure",), ("error detection", "file systems")),
    _hex("xxHash64", 16, WEAK, 64, ("not cryptographically secure",), ("fast checksums", "deduplication")),

    # Database and Windows hashes
    _hex("MySQL323", 16, WEAK, 64, ("trivially reversible key schedule", "no salt"), ("MySQL before 4.1",)),
    HashSignature(
        name="MySQL5",
        pattern=re.compile(r"^\*[A-Fa-f0-9]{40}$"),
        length=41,
        charset=HashCharset.HEX_WITH_SEPARATOR,
        strength=WEAK,
        algorithm="SHA-1(SHA-1)",
        output_size=160,
        vulnerabilities=("no salt", "fast computation"),
        uses=("MySQL 4.1+ user passwords",),
    ),
    _hex("NTLM", 32, WEAK, 128,
         ("pass-the-hash attacks", "rainbow tables", "no salt"),
         ("Windows authentication", "legacy systems")),
    _hex("LM", 32, WEAK, 64,
         ("split into two DES halves", "uppercase only", "no salt"),
         ("pre-Vista Windows authentication",)),
    HashSignature(
        name="NTLMv2",
        pattern=re.compile(r"^[a-fA-F0-9]{32}:[a-fA-F0-9]{32}$"),
        length=65,
        charset=HashCharset.HEX_WITH_SEPARATOR,
        strength=MODERATE,
        algorithm="NTLMv2",
        output_size=128,
        vulnerabilities=("offline attacks possible",),
        uses=("Windows domain authentication",),
    ),

    # Unix crypt variants
    HashSignature(
        name="DES-crypt",
        pattern=re.compile(r"^[A-Za-z0-9./]{13}$"),
        length=13,
        charset=HashCharset.DES_CRYPT,
        strength=WEAK,
        algorithm="DES-crypt",
        output_size=64,
        vulnerabilities=("DES is broken", "short keys", "no salt randomness"),
        uses=("legacy Unix systems",),
    ),
    HashSignature(
        name="MD5-crypt",
        pattern=re.compile(r"^\$1\$[A-Za-z0-9./]{0,8}\$[A-Za-z0-9./]{22}$"),
        length=None,
        charset=HashCharset.BASE64_VARIANT,
        strength=WEAK,
        algorithm="MD5-crypt",
        output_size=128,
        vulnerabilities=("MD5 vulnerabilities", "fast computation"),
        uses=("legacy Unix password hashing",),
    ),
    HashSignature(
        name="Apache-APR1",
        pattern=re.compile(r"^\$apr1\$[A-Za-z0-9./]{0,8}\$[A-Za-z0-9./]{22}$"),
        length=None,
        charset=HashCharset.BASE64_VARIANT,
        strength=WEAK,
        algorithm="APR1-MD5-crypt",
        output_size=128,
        vulnerabilities=("MD5 vulnerabilities", "fast computation"),
        uses=("Apache htpasswd files",),
    ),
    HashSignature(
        name="phpass",
        pattern=re.compile(r"^\$[PH]\$[A-Za-z0-9./]{31}$"),
        length=34,
        charset=HashCharset.BASE64_VARIANT,
        strength=MODERATE,
        algorithm="phpass-MD5-crypt",
        output_size=128,
        vulnerabilities=("MD5 based",),
        uses=("WordPress", "phpBB"),
    ),
    HashSignature(
        name="SHA256-crypt",
        pattern=re.compile(r"^\$5\$(rounds=[0-9]+\$)?[A-Za-z0-9./]*\$[A-Za-z0-9./]{43}$"),
        length=None,
        charset=HashCharset.BASE64_VARIANT,
        strength=STRONG,
        algorithm="SHA256-crypt",
        output_size=256,
        uses=("Unix password hashing",),
    ),
    HashSignature(
        name="SHA512-crypt",
        pattern=re.compile(r"^\$6\$(rounds=[0-9]+\$)?[A-Za-z0-9./]*\$[A-Za-z0-9./]{86}$"),
        length=None,
        charset=HashCharset.BASE64_VARIANT,
        strength=STRONG,
        algorithm="SHA512-crypt",
        output_size=512,
        uses=("Unix password hashing",),
    ),

    # Specialized hashes
    _hex("Tiger-128", 32, MODERATE, 128, (), ("file integrity", "academic research")),
    _hex("Tiger-160", 40, MODERATE, 160, (), ("file integrity", "digital signatures")),
    _hex("Tiger-192", 48, STRONG, 192, (), ("cryptographic applications",)),
    _hex("GOST R 34.11-94", 64, MODERATE, 256, ("theoretical collision attacks",), ("Russian standards",)),
    _hex("Streebog-512", 128, STRONG, 512, (), ("Russian national standard",)),

    # HAVAL family
    _hex("HAVAL-128", 32, MODERATE, 128, ("variable security",), ("legacy systems", "academic research")),
    _hex("HAVAL-160", 40, MODERATE, 160, ("variable security",), ("legacy systems",)),
    _hex("HAVAL-192", 48, MODERATE, 192, ("variable security",), ("academic research",)),
    _hex("HAVAL-224", 56, MODERATE, 224, ("variable security",), ("academic research",)),
    _hex("HAVAL-256", 64, MODERATE, 256, ("variable security",), ("academic research",)),
)

SIGNATURES_BY_NAME: dict[str, HashSignature] = {signature.name: signature for signature in SIGNATURES}


# Shapes that end detection early; checked in order.
QUICK_SHAPES: tuple[tuple[str, re.Pattern[str]], ...] = (
    ("bcrypt", SIGNATURES_BY_NAME["bcrypt"].pattern),
    ("Argon2id", SIGNATURES_BY_NAME["Argon2id"].pattern),
    ("Argon2i", SIGNATURES_BY_NAME["Argon2i"].pattern),
    ("Argon2d", SIGNATURES_BY_NAME["Argon2d"].pattern),
    ("SHA512-crypt", SIGNATURES_BY_NAME["SHA512-crypt"].pattern),
    ("SHA256-crypt", SIGNATURES_BY_NAME["SHA256-crypt"].pattern),
    ("MD5-crypt", SIGNATURES_BY_NAME["MD5-crypt"].pattern),
    ("MD5", re.compile(r"^[a-fA-F0-9]{32}$")),
    ("SHA-1", re.compile(r"^[a-fA-F0-9]{40}$")),
    ("SHA-224", re.compile(r"^[a-fA-F0-9]{56}$")),
    ("SHA-256", re.compile(r"^[a-fA-F0-9]{64}$")),
    ("SHA-384", re.compile(r"^[a-fA-F0-9]{96}$")),
    ("SHA-512", re.compile(r"^[a-fA-F0-9]{128}$")),
)
