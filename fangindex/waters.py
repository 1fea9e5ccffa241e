"""Water-body data loader from YAML (schema_version: 1)."""

import logging
from dataclasses import dataclass, field
from enum import Enum
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

import yaml

from .errors import MalformedCandidate, ProviderUnavailable

# Configure logging
logger = logging.getLogger(__name__)

DEFAULT_SEARCH_RADIUS_KM = 20.0
DEFAULT_LIMIT = 3
# Bendestorf
DEFAULT_FALLBACK_LOCATION = (53.3347, 9.9717)


class WaterType(str, Enum):
    POND = "pond"
    LAKE = "lake"
    RIVER = "river"
    CANAL = "canal"
    STREAM = "stream"
    UNKNOWN = "unknown"


class Species(str, Enum):
    TROUT = "Trout"
    GRAYLING = "Grayling"
    CHAR = "Char"
    PIKE = "Pike"
    ZANDER = "Zander"
    PERCH = "Perch"
    CARP = "Carp"
    TENCH = "Tench"
    CATFISH = "Catfish"
    EEL = "Eel"
    BREAM = "Bream"
    ROACH = "Roach"
    RUDD = "Rudd"
    CHUB = "Chub"
    IDE = "Ide"
    ASP = "Asp"
    BARBEL = "Barbel"
    SALMON = "Salmon"


# Small and private waters (ponds, stocked trout/carp waters) get a ranking bonus
WATER_TYPE_ALIASES: Dict[str, WaterType] = {
    "pond": WaterType.POND,
    "private-pond": WaterType.POND,
    "trout-pond": WaterType.POND,
    "carp-pond": WaterType.POND,
    "fishing-pond": WaterType.POND,
    "trout-lake": WaterType.POND,
    "teich": WaterType.POND,
    "angelteich": WaterType.POND,
    "forellenteich": WaterType.POND,
    "karpfenteich": WaterType.POND,
    "forellensee": WaterType.POND,
    "lake": WaterType.LAKE,
    "see": WaterType.LAKE,
    "baggersee": WaterType.LAKE,
    "reservoir": WaterType.LAKE,
    "river": WaterType.RIVER,
    "fluss": WaterType.RIVER,
    "canal": WaterType.CANAL,
    "kanal": WaterType.CANAL,
    "stream": WaterType.STREAM,
    "brook": WaterType.STREAM,
    "bach": WaterType.STREAM,
}

SPECIES_ALIASES: Dict[str, Species] = {
    "trout": Species.TROUT,
    "rainbow-trout": Species.TROUT,
    "brown-trout": Species.TROUT,
    "forelle": Species.TROUT,
    "regenbogenforelle": Species.TROUT,
    "bachforelle": Species.TROUT,
    "grayling": Species.GRAYLING,
    "äsche": Species.GRAYLING,
    "char": Species.CHAR,
    "saibling": Species.CHAR,
    "pike": Species.PIKE,
    "hecht": Species.PIKE,
    "zander": Species.ZANDER,
    "pikeperch": Species.ZANDER,
    "perch": Species.PERCH,
    "barsch": Species.PERCH,
    "carp": Species.CARP,
    "karpfen": Species.CARP,
    "tench": Species.TENCH,
    "schleie": Species.TENCH,
    "catfish": Species.CATFISH,
    "wels": Species.CATFISH,
    "eel": Species.EEL,
    "aal": Species.EEL,
    "bream": Species.BREAM,
    "brasse": Species.BREAM,
    "blei": Species.BREAM,
    "roach": Species.ROACH,
    "rotauge": Species.ROACH,
    "rudd": Species.RUDD,
    "rotfeder": Species.RUDD,
    "chub": Species.CHUB,
    "döbel": Species.CHUB,
    "ide": Species.IDE,
    "aland": Species.IDE,
    "asp": Species.ASP,
    "rapfen": Species.ASP,
    "barbel": Species.BARBEL,
    "barbe": Species.BARBEL,
    "salmon": Species.SALMON,
    "lachs": Species.SALMON,
}


def _normalize_key(value: str) -> str:
    return "-".join(value.strip().lower().replace("_", " ").split())


def normalize_water_type(value: Optional[str]) -> WaterType:
    """Map a free-text water type to a WaterType (UNKNOWN if not recognized)."""
    if not value:
        return WaterType.UNKNOWN
    return WATER_TYPE_ALIASES.get(_normalize_key(value), WaterType.UNKNOWN)


def normalize_species(value: Optional[str]) -> Optional[Species]:
    """Map a free-text species name to a Species, None if not recognized."""
    if not value:
        return None
    return SPECIES_ALIASES.get(_normalize_key(value))


@dataclass
class WaterBody:
    """Fishable water with coordinates and stocked species."""
    id: str
    name: str
    water_type: WaterType
    latitude: float
    longitude: float
    region: str = ""
    fish_species: List[Species] = field(default_factory=list)
    permit_price: Optional[float] = None
    is_assumed: bool = False
    raw_type: str = ""
    station_id: Optional[str] = None

    @property
    def is_small_water(self) -> bool:
        return self.water_type == WaterType.POND


@dataclass
class Settings:
    """Search defaults from the YAML `defaults` block."""
    search_radius_km: float = DEFAULT_SEARCH_RADIUS_KM
    limit: int = DEFAULT_LIMIT
    fallback_location: Tuple[float, float] = DEFAULT_FALLBACK_LOCATION


@dataclass
class LoadResult:
    """Result of loading water bodies from YAML."""
    waters: List[WaterBody]
    settings: Settings
    n_skipped: int
    skipped_ids: List[str]


def _is_valid_coordinates(lat: float, lon: float) -> bool:
    """Check if coordinates are valid."""
    return -90.0 <= lat <= 90.0 and -180.0 <= lon <= 180.0


def _parse_species(names: Any) -> List[Species]:
    if isinstance(names, str):
        names = [names]
    result: List[Species] = []
    for name in names or []:
        species = normalize_species(str(name))
        if species is None:
            logger.debug(f"Unknown species '{name}', ignored")
            continue
        if species not in result:
            result.append(species)
    return result


def parse_water_body(data: Dict[str, Any]) -> WaterBody:
    """Parse one water-body record.

    Raises:
        MalformedCandidate: If the name is missing or coordinates are unusable.
    """
    water_id = str(data.get("id") or data.get("name") or "unknown")
    name = str(data.get("name") or "").strip()
    if not name:
        raise MalformedCandidate(f"'{water_id}': missing name")

    try:
        lat = float(data.get("latitude", data.get("lat")))
        lon = float(data.get("longitude", data.get("lon")))
    except (TypeError, ValueError) as e:
        raise MalformedCandidate(f"'{water_id}': invalid coordinates ({e})") from e

    if not _is_valid_coordinates(lat, lon):
        raise MalformedCandidate(
            f"'{water_id}': coordinates out of range (lat={lat}, lon={lon})"
        )

    permit_price = data.get("permit_price")
    try:
        permit_price = float(permit_price) if permit_price is not None else None
    except (TypeError, ValueError):
        logger.warning(f"Water '{water_id}': ignoring invalid permit_price {permit_price!r}")
        permit_price = None

    raw_type = str(data.get("type") or "")
    station_id = data.get("station_id")

    return WaterBody(
        id=water_id,
        name=name,
        water_type=normalize_water_type(raw_type),
        latitude=lat,
        longitude=lon,
        region=str(data.get("region") or ""),
        fish_species=_parse_species(data.get("fish_species")),
        permit_price=permit_price,
        is_assumed=bool(data.get("is_assumed", False)),
        raw_type=raw_type,
        station_id=str(station_id) if station_id else None,
    )


def _parse_settings(defaults: Dict[str, Any]) -> Settings:
    fallback = defaults.get("fallback_location") or {}
    return Settings(
        search_radius_km=float(defaults.get("search_radius_km", DEFAULT_SEARCH_RADIUS_KM)),
        limit=int(defaults.get("limit", DEFAULT_LIMIT)),
        fallback_location=(
            float(fallback.get("lat", DEFAULT_FALLBACK_LOCATION[0])),
            float(fallback.get("lon", DEFAULT_FALLBACK_LOCATION[1])),
        ),
    )


def load_waters(yaml_path: Optional[Path] = None) -> LoadResult:
    """Load water bodies and search defaults from YAML file (schema_version: 1).

    Args:
        yaml_path: Path to YAML file. Defaults to waters.yaml in same directory.

    Returns:
        LoadResult with waters, settings, and skip statistics.

    Raises:
        ProviderUnavailable: If the file cannot be read or parsed.
    """
    if yaml_path is None:
        yaml_path = Path(__file__).parent / "waters.yaml"

    try:
        with open(yaml_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ProviderUnavailable(f"Cannot load water bodies from {yaml_path}: {e}") from e

    try:
        settings = _parse_settings(data.get("defaults") or {})
    except (AttributeError, TypeError, ValueError) as e:
        raise ProviderUnavailable(f"Invalid defaults in {yaml_path}: {e}") from e

    waters = []
    skipped_ids = []

    for record in data.get("waters") or []:
        if not isinstance(record, dict):
            logger.warning(f"Skipping water: not a mapping ({record!r})")
            skipped_ids.append("unknown")
            continue
        try:
            waters.append(parse_water_body(record))
        except MalformedCandidate as e:
            logger.warning(f"Skipping water {e}")
            skipped_ids.append(str(record.get("id") or record.get("name") or "unknown"))

    if skipped_ids:
        logger.info(f"Skipped {len(skipped_ids)} waters due to malformed records: {skipped_ids}")

    return LoadResult(
        waters=waters,
        settings=settings,
        n_skipped=len(skipped_ids),
        skipped_ids=skipped_ids,
    )
