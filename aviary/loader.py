"""
YAML data loader with schema validation.

Loads world and species definitions from YAML files and validates them
against JSON schemas.
"""

import yaml
import json
from pathlib import Path
from typing import Dict, Optional
import jsonschema

from .constants import SPAWN_SPEED_DEFAULT
from .data_types import (
    Species, FlightProperties, RuleWeights,
    World, WorldBounds, SimulationConfig, GlobalTunables, SpawningConfig
)

# JSON schemas shipped with the package
DEFAULT_SCHEMA_DIR = Path(__file__).parent / "schemas"

# World file loaded by load_all_data() unless overridden
DEFAULT_WORLD_FILE = "rookery.yaml"


class DataLoadError(Exception):
    """Raised when data loading or validation fails"""
    pass


def load_yaml(file_path: Path) -> dict:
    """Load YAML file and return parsed dict"""
    file_path = Path(file_path)
    if not file_path.exists():
        raise DataLoadError(f"File not found: {file_path}")

    try:
        with open(file_path, 'r') as f:
            data = yaml.safe_load(f)
    except yaml.YAMLError as e:
        raise DataLoadError(f"YAML parse error in {file_path}: {e}")

    if not isinstance(data, dict):
        raise DataLoadError(f"Expected a mapping at top level of {file_path}")
    return data


def validate_against_schema(data: dict, schema_path: Path, data_path: Path):
    """Validate data dict against JSON schema"""
    if not schema_path.exists():
        raise DataLoadError(f"Schema not found: {schema_path}")

    try:
        with open(schema_path, 'r') as f:
            schema = json.load(f)
        jsonschema.validate(instance=data, schema=schema)
    except jsonschema.ValidationError as e:
        raise DataLoadError(f"Validation error in {data_path}: {e.message}")
    except json.JSONDecodeError as e:
        raise DataLoadError(f"Invalid JSON schema {schema_path}: {e}")


def parse_species(data: dict) -> Species:
    """Build a Species from an already-validated dict"""
    return Species(
        species_id=data['species_id'],
        name=data['name'],
        flight=FlightProperties(**data['flight']),
        weights=RuleWeights(**data.get('weights', {})),
        spawn_speed=data.get('spawn_speed', SPAWN_SPEED_DEFAULT),
        description=data.get('description')
    )


def parse_world(data: dict) -> World:
    """Build a World from an already-validated dict"""
    spawning = [SpawningConfig(**s) for s in data.get('spawning', {}).get('species', [])]

    return World(
        world_id=data['world_id'],
        name=data['name'],
        bounds=WorldBounds(**data['bounds']),
        simulation=SimulationConfig(**data.get('simulation', {})),
        tunables=GlobalTunables(**data.get('tunables', {})),
        spawning=spawning,
        description=data.get('description')
    )


def load_species(file_path: Path, schema_dir: Optional[Path] = None) -> Species:
    """Load species definition from YAML"""
    data = load_yaml(file_path)

    if schema_dir:
        validate_against_schema(data, Path(schema_dir) / "species.schema.json", file_path)

    try:
        return parse_species(data)
    except (KeyError, TypeError) as e:
        raise DataLoadError(f"Malformed species {file_path}: {e}")


def load_world(file_path: Path, schema_dir: Optional[Path] = None) -> World:
    """Load world configuration from YAML"""
    data = load_yaml(file_path)

    if schema_dir:
        validate_against_schema(data, Path(schema_dir) / "world.schema.json", file_path)

    try:
        return parse_world(data)
    except (KeyError, TypeError) as e:
        raise DataLoadError(f"Malformed world {file_path}: {e}")


def load_species_registry(species_dir: Path, schema_dir: Optional[Path] = None) -> Dict[str, Species]:
    """Load all species from directory"""
    species_dir = Path(species_dir)
    if not species_dir.exists():
        raise DataLoadError(f"Species directory not found: {species_dir}")

    registry = {}
    for yaml_file in sorted(species_dir.glob("*.yaml")):
        species = load_species(yaml_file, schema_dir)
        registry[species.species_id] = species

    if not registry:
        raise DataLoadError(f"No species files found in {species_dir}")

    return registry


def load_all_data(
    data_root: Path,
    schema_dir: Optional[Path] = DEFAULT_SCHEMA_DIR,
    world_file: str = DEFAULT_WORLD_FILE
) -> dict:
    """Load all simulation data from data directory

    Returns dict with keys: world, species
    """
    data_root = Path(data_root)

    world = load_world(data_root / "world" / world_file, schema_dir)
    species = load_species_registry(data_root / "species", schema_dir)

    for spawn_config in world.spawning:
        if spawn_config.species_id not in species:
            raise DataLoadError(
                f"World {world.world_id} spawns unknown species {spawn_config.species_id}"
            )

    return {
        'world': world,
        'species': species
    }
