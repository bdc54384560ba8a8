"""
Catalog Module - Immutable character/background tables and seeded selection
"""

import json
import random
from dataclasses import dataclass, field
from pathlib import Path
from types import MappingProxyType
from typing import Any, Dict, List, Mapping, Optional, Tuple
from loguru import logger

from modules.layout import WatermarkFragment
from utils.exceptions import CharacterNotFound


@dataclass(frozen=True)
class Emotion:
    """Sprite variant of a character"""
    name: str
    filename: str


@dataclass(frozen=True)
class Background:
    """Background image entry"""
    name: str
    filename: str


@dataclass(frozen=True)
class Character:
    """Character with its sprites and name watermark fragments"""
    id: str
    name: str
    emotions: Tuple[Emotion, ...] = ()
    display_name: Tuple[WatermarkFragment, ...] = ()

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Character":
        return cls(
            id=data["id"],
            name=data.get("name", data["id"]),
            emotions=tuple(
                Emotion(name=e["name"], filename=e["filename"])
                for e in data.get("emotions", [])
            ),
            display_name=tuple(
                WatermarkFragment.from_dict(part)
                for part in data.get("displayName", [])
            ),
        )


@dataclass(frozen=True)
class Catalog:
    """
    Read-only snapshot of every character and background

    Built once at startup and shared between requests; nothing mutates it
    afterwards, so concurrent readers need no locking.
    """
    characters: Mapping[str, Character]
    backgrounds: Tuple[Background, ...]
    default_character_id: str = "char2"

    @classmethod
    def from_data(
        cls,
        characters: List[Dict[str, Any]],
        backgrounds: List[Dict[str, Any]],
        default_character_id: str = "char2"
    ) -> "Catalog":
        chars = {}
        for entry in characters:
            character = Character.from_dict(entry)
            if character.id in chars:
                logger.warning(f"Duplicate character id '{character.id}' - keeping the last entry")
            chars[character.id] = character

        return cls(
            characters=MappingProxyType(chars),
            backgrounds=tuple(Background(name=b["name"], filename=b["filename"]) for b in backgrounds),
            default_character_id=default_character_id,
        )

    @classmethod
    def load(
        cls,
        catalog_dir: Path,
        characters_file: str = "characters.json",
        backgrounds_file: str = "backgrounds.json",
        default_character_id: str = "char2"
    ) -> "Catalog":
        """
        Load catalog from JSON files

        Args:
            catalog_dir: Directory holding the JSON files
            characters_file: Character list file name
            backgrounds_file: Background list file name
            default_character_id: Character used when a request names none

        Returns:
            Catalog snapshot

        Raises:
            FileNotFoundError: If a catalog file is missing
            ValueError: If a catalog file is not valid JSON
        """
        catalog_dir = Path(catalog_dir)

        with open(catalog_dir / characters_file, "r", encoding="utf-8") as f:
            characters = json.load(f)
        with open(catalog_dir / backgrounds_file, "r", encoding="utf-8") as f:
            backgrounds = json.load(f)

        catalog = cls.from_data(characters, backgrounds, default_character_id)
        logger.info(
            f"Catalog loaded from {catalog_dir}: {len(catalog.characters)} characters, "
            f"{len(catalog.backgrounds)} backgrounds"
        )
        return catalog

    def character(self, character_id: str) -> Character:
        try:
            return self.characters[character_id]
        except KeyError:
            raise CharacterNotFound(character_id) from None

    def character_ids(self) -> List[str]:
        return sorted(self.characters)

    def list_characters(self) -> List[Dict[str, str]]:
        return [
            {"id": cid, "name": self.characters[cid].name}
            for cid in self.character_ids()
        ]

    def emotions(self, character_id: str) -> List[Dict[str, Any]]:
        """List emotions with 1-based ids"""
        character = self.character(character_id)
        return [
            {"id": i + 1, "name": emotion.name}
            for i, emotion in enumerate(character.emotions)
        ]

    def default_character(self) -> Character:
        return self.character(self.default_character_id)


@dataclass(frozen=True)
class Selection:
    """Resolved character/emotion/background for one composition"""
    character: Character
    emotion_index: int
    background_index: int
    emotion: Optional[Emotion] = field(default=None)
    background: Optional[Background] = field(default=None)


class Selector:
    """
    Resolves requested ids and indices against the catalog

    Missing or out-of-range choices are drawn from the injected random
    source, so a seeded ``random.Random`` gives reproducible selections.
    """

    RANDOM_CHARACTER = "random"

    def __init__(self, catalog: Catalog, rng: Optional[random.Random] = None):
        self.catalog = catalog
        self.rng = rng or random.Random()

    def resolve_character(self, requested: Optional[str] = None) -> Character:
        """
        Args:
            requested: Character id, "random", or empty for the default

        Raises:
            CharacterNotFound: If the id is unknown
        """
        if requested == self.RANDOM_CHARACTER:
            ids = self.catalog.character_ids()
            if not ids:
                return self.catalog.default_character()
            return self.catalog.character(self.rng.choice(ids))
        if requested:
            return self.catalog.character(requested)
        return self.catalog.default_character()

    def _resolve_index(self, count: int, requested: Optional[int]) -> int:
        if count <= 0:
            return 0
        if requested is not None and 1 <= requested <= count:
            return requested
        return self.rng.randint(1, count)

    def resolve_emotion(self, character: Character, index: Optional[int] = None) -> Tuple[int, Optional[Emotion]]:
        """Resolve a 1-based emotion index for character"""
        e_index = self._resolve_index(len(character.emotions), index)
        return e_index, character.emotions[e_index - 1] if e_index else None

    def resolve_background(self, index: Optional[int] = None) -> Tuple[int, Optional[Background]]:
        """Resolve a 1-based background index"""
        b_index = self._resolve_index(len(self.catalog.backgrounds), index)
        return b_index, self.catalog.backgrounds[b_index - 1] if b_index else None

    def select(
        self,
        character_id: Optional[str] = None,
        emotion_index: Optional[int] = None,
        background_index: Optional[int] = None
    ) -> Selection:
        """
        Resolve a full selection

        Indices are 1-based; 0 means the catalog has nothing to choose from.
        """
        character = self.resolve_character(character_id)
        e_index, emotion = self.resolve_emotion(character, emotion_index)
        b_index, background = self.resolve_background(background_index)

        selection = Selection(
            character=character,
            emotion_index=e_index,
            background_index=b_index,
            emotion=emotion,
            background=background,
        )
        logger.debug(
            f"Selected character={character.id} emotion={e_index} background={b_index}"
        )
        return selection
