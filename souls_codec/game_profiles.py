"""Game-specific format profiles for FLVER loading.

Each supported game + platform combination has a GameProfile that describes
which container versions it ships, its byte order, and the geometry
conventions that are not recorded in the file itself (whether face sets are
expected to be edge compressed, the default index width for new files).

Profiles are registered in a global dict and can be selected by id or
auto-detected from a parsed FLVER header.

Adding a new game:
    1. Read reference files, note the header versions and byte order
    2. Check face set index sizes and vertex buffer marker bits
    3. Create a GameProfile with the discovered parameters
    4. Call register_profile() to add it to the registry
"""

from dataclasses import dataclass, field
from typing import Dict, Optional


# ---------------------------------------------------------------------------
# Configuration dataclasses
# ---------------------------------------------------------------------------

@dataclass
class GeometryConfig:
    """Configuration for geometry decoding."""

    # Vertex index width written into new containers (16 or 32).
    default_vertex_index_size: int = 16

    # Divisor for UV shorts. None = derive from the container version
    # (2048 from 0x2000F, 1024 before).
    uv_factor: Optional[float] = None

    # Console builds store face sets through the edge tool chain.
    edge_compressed: bool = False


@dataclass
class GameProfile:
    """Complete format profile for a specific game + platform combination."""

    # Display info
    game_id: str = "ds3_pc"
    game_name: str = "Dark Souls III (PC)"

    # Expected FLVER version range (inclusive).
    min_version: int = 0x20013
    max_version: int = 0x20014

    # Expected endianness: "little", "big", or "any".
    expected_endian: str = "little"

    geometry: GeometryConfig = field(default_factory=GeometryConfig)

    notes: str = ""

    @property
    def big_endian(self):
        return self.expected_endian == "big"


# ---------------------------------------------------------------------------
# Profile registry
# ---------------------------------------------------------------------------

GAME_PROFILES: Dict[str, GameProfile] = {}

DEFAULT_PROFILE_ID = "ds3_pc"


def register_profile(profile: GameProfile) -> None:
    """Register a game profile in the global registry."""
    GAME_PROFILES[profile.game_id] = profile


def get_profile(game_id: str) -> Optional[GameProfile]:
    """Look up a profile by its game_id string."""
    return GAME_PROFILES.get(game_id)


# ---------------------------------------------------------------------------
# Auto-detection
# ---------------------------------------------------------------------------

def detect_profile(header) -> GameProfile:
    """Auto-detect the best matching GameProfile for a FLVER header.

    Profiles whose version range or byte order excludes the header are
    skipped; among the rest the narrowest version range wins.
    Falls back to the default profile when nothing matches.

    Args:
        header: FLVERHeader (already read).
    """
    best_score = None
    best_profile = None

    for profile in GAME_PROFILES.values():
        # Version range check (hard requirement).
        if not (profile.min_version <= header.version <= profile.max_version):
            continue

        score = 1

        if profile.expected_endian != "any":
            if profile.big_endian == header.big_endian:
                score += 2
            else:
                continue

        # Narrower version ranges win ties.
        score = (score, profile.min_version - profile.max_version)

        if best_score is None or score > best_score:
            best_score = score
            best_profile = profile

    if best_profile is None:
        best_profile = GAME_PROFILES[DEFAULT_PROFILE_ID]

    return best_profile


# ---------------------------------------------------------------------------
# Built-in profiles
# ---------------------------------------------------------------------------

register_profile(GameProfile(
    game_id="des_ps3",
    game_name="Demon's Souls (PS3)",
    min_version=0x20005,
    max_version=0x20009,
    expected_endian="big",
    geometry=GeometryConfig(edge_compressed=True),
    notes="FLVER 0x20005-0x20009, BE, short face set headers",
))

register_profile(GameProfile(
    game_id="ds1_ps3",
    game_name="Dark Souls (PS3)",
    min_version=0x2000B,
    max_version=0x2000D,
    expected_endian="big",
    geometry=GeometryConfig(edge_compressed=True),
    notes="FLVER 0x2000B-0x2000D, BE, edge-compressed face sets",
))

register_profile(GameProfile(
    game_id="ds1_pc",
    game_name="Dark Souls (PC)",
    min_version=0x2000B,
    max_version=0x2000D,
    expected_endian="little",
    notes="FLVER 0x2000B-0x2000D, LE",
))

register_profile(GameProfile(
    game_id="ds2_pc",
    game_name="Dark Souls II (PC)",
    min_version=0x2000E,
    max_version=0x20010,
    expected_endian="little",
    notes="FLVER 0x2000E-0x20010, LE, 2048 UV factor from 0x2000F",
))

register_profile(GameProfile(
    game_id="bb_ps4",
    game_name="Bloodborne (PS4)",
    min_version=0x20013,
    max_version=0x20016,
    expected_endian="little",
    geometry=GeometryConfig(default_vertex_index_size=32),
    notes="FLVER 0x20013-0x20016, LE",
))

register_profile(GameProfile(
    game_id="ds3_pc",
    game_name="Dark Souls III (PC)",
    min_version=0x20013,
    max_version=0x20014,
    expected_endian="little",
    notes="FLVER 0x20013-0x20014, LE",
))

register_profile(GameProfile(
    game_id="sekiro_pc",
    game_name="Sekiro (PC)",
    min_version=0x2001A,
    max_version=0x2001A,
    expected_endian="little",
    geometry=GeometryConfig(default_vertex_index_size=32),
    notes="FLVER 0x2001A, LE, mesh bounding boxes carry a third vector",
))
