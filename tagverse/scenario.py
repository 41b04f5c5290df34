"""
Match loading for JSON-defined games.

A match file fixes everything needed to replay a game: the game
configuration, both personalities (preset names or full objects), an
optional communication configuration and an optional random seed.

Match file structure:
```json
{
  "name": "Strategist vs Brawler",
  "description": "...",
  "seed": 7,
  "config": {"tag_distance": 2.0, "game_duration": 20, "max_rounds": 4},
  "personalities": {
    "p1": "strategic",
    "p2": {"type": "aggressive", "speed": 0.9, "aggression": 0.8, "caution": 0.2}
  },
  "communication": {"message_expiration_time": 3000}
}
```

Usage:
    loader = MatchLoader()
    match = loader.load("duel")
    coordinator = match.build_coordinator()
"""

import json
import random
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

from pydantic import BaseModel, Field

from .clock import Clock
from .communication.messages import CommunicationConfig
from .config import Config
from .coordinator import GameCoordinator
from .schemas import AIPersonality, TagGameConfig, personality_preset


class MatchDefinition(BaseModel):
    """A fully parsed match file."""

    name: str
    description: str = ""
    game_config: TagGameConfig
    p1_personality: AIPersonality
    p2_personality: AIPersonality
    communication: Optional[CommunicationConfig] = Field(
        None, description="Present when the match runs with the communication bus"
    )
    seed: Optional[int] = None

    def build_coordinator(
        self, clock: Optional[Clock] = None, rng: Optional[random.Random] = None
    ) -> GameCoordinator:
        """Create a coordinator for this match (seeded from ``seed`` unless ``rng`` is given)."""

        if rng is None and self.seed is not None:
            rng = random.Random(self.seed)
        return GameCoordinator(
            self.game_config,
            self.p1_personality.model_copy(),
            self.p2_personality.model_copy(),
            clock=clock,
            rng=rng,
        )


class MatchLoader:
    """Load and validate match definitions from JSON files.

    Match files live in ``{PROJECT_ROOT}/examples/matches/`` by default and
    are named ``{match_name}.json``. Files starting with ``_`` are hidden
    from ``list_matches``.

    Validation:
    - Required fields: name, config, personalities
    - ``personalities`` must define both ``p1`` and ``p2``
    - Game and communication values go through pydantic validation
    """

    def __init__(self, matches_dir: Optional[Path] = None):
        self.matches_dir = matches_dir or Config.MATCHES_DIR

    def load(self, match_name: str) -> MatchDefinition:
        """Load a match by name.

        Raises:
            FileNotFoundError: If the match file doesn't exist
            ValueError: If required fields are missing or values are invalid
            json.JSONDecodeError: If the file contains invalid JSON
        """
        match_path = self.matches_dir / f"{match_name}.json"

        if not match_path.exists():
            raise FileNotFoundError(f"Match '{match_name}' not found at {match_path}")

        return self.load_file(match_path)

    def load_file(self, match_path: Path) -> MatchDefinition:
        """Load a match from an explicit path."""
        match_path = Path(match_path)
        if not match_path.exists():
            raise FileNotFoundError(f"Match file not found at {match_path}")

        data = json.loads(match_path.read_text())
        return self.parse(data)

    def parse(self, data: Dict[str, Any]) -> MatchDefinition:
        """Build a MatchDefinition from already-decoded JSON data."""
        self._validate_match(data)

        personalities = data["personalities"]
        communication = data.get("communication")

        return MatchDefinition(
            name=data["name"],
            description=data.get("description", ""),
            game_config=TagGameConfig(**data["config"]),
            p1_personality=self._parse_personality(personalities["p1"]),
            p2_personality=self._parse_personality(personalities["p2"]),
            communication=CommunicationConfig(**communication) if communication is not None else None,
            seed=data.get("seed"),
        )

    def _validate_match(self, data: Dict[str, Any]) -> None:
        required = ["name", "config", "personalities"]
        missing = [field for field in required if field not in data]

        if missing:
            raise ValueError(f"Match missing required fields: {missing}")

        personalities = data["personalities"]
        if not isinstance(personalities, dict):
            raise ValueError("'personalities' must be an object with 'p1' and 'p2' entries")

        absent = [agent_id for agent_id in ("p1", "p2") if agent_id not in personalities]
        if absent:
            raise ValueError(f"Match personalities missing agents: {absent}")

    def _parse_personality(self, raw: Union[str, Dict[str, Any]]) -> AIPersonality:
        """Accept a preset name or a full personality object."""
        if isinstance(raw, str):
            return personality_preset(raw)
        if isinstance(raw, dict):
            return AIPersonality(**raw)
        raise ValueError(f"Personality must be a preset name or an object, got {type(raw).__name__}")

    def list_matches(self) -> List[str]:
        """List available match names (without .json extension)."""
        if not self.matches_dir.exists():
            return []

        return sorted(
            f.stem for f in self.matches_dir.glob("*.json")
            if not f.name.startswith("_")
        )

    def get_match_info(self, match_name: str) -> Dict[str, Any]:
        """Get match metadata without building the models."""
        match_path = self.matches_dir / f"{match_name}.json"
        data = json.loads(match_path.read_text())

        return {
            "name": data.get("name", match_name),
            "description": data.get("description", "No description"),
            "max_rounds": data.get("config", {}).get("max_rounds", 10),
            "communication": "communication" in data,
        }


def load_match(match_name: str) -> MatchDefinition:
    """Convenience function to load a match from the default directory."""
    loader = MatchLoader()
    return loader.load(match_name)
