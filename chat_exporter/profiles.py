# -*- coding: utf-8 -*-
"""Versioned locator profiles.

The chat site ships hashed class names that change between releases, so
every selector the extractors consume lives in a YAML profile instead of
in code. Each release gets its own file under ``profiles/``.
"""

from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Optional

import yaml
from bs4 import BeautifulSoup

from .errors import ProfileError
from .log import log_debug, log_warn
from .state import DOWN, UP

PROFILES_DIR = Path(__file__).resolve().parent / "profiles"


@dataclass
class Locators:
    container: str = ".dad65929"
    user_message: str = "._9663006 > .fbb737a4"
    assistant_class: str = "_4f9bf79"
    reply_container: str = "._43c05b5"
    status_hint: str = "._58a6d71._19db599"
    thinking_chain: str = ".e1675d8b"
    thinking_paragraph: str = ".ds-markdown-paragraph"
    final_answer: str = "div.ds-markdown.ds-markdown--block"
    title: str = ".d8ed659a"
    paragraph: str = ".ds-markdown-paragraph"
    display_math: str = ".katex-display"
    inline_math: str = ".katex"
    math_annotation: str = 'annotation[encoding="application/x-tex"]'
    chrome: list[str] = field(default_factory=lambda: [
        "button", "input", ".ds-message-feedback-container", ".eb23581b.dfa60d66",
    ])


@dataclass
class StateKeys:
    """Prop names looked up in the structured-state records, and the chain each lives on."""
    answer: str = "markdown"
    thinking: str = "content"
    paragraph: str = "content"
    answer_from: str = UP
    thinking_from: str = DOWN
    paragraph_from: str = UP


@dataclass
class Profile:
    name: str
    version: str = "0"
    is_default: bool = False
    locators: Locators = field(default_factory=Locators)
    state: StateKeys = field(default_factory=StateKeys)

    @property
    def label(self) -> str:
        return f"{self.name}@{self.version}"


def _pick(cls, data) -> dict:
    if not isinstance(data, dict): return {}
    known = {f.name for f in fields(cls)}
    unknown = set(data) - known
    if unknown:
        log_warn(f"Ignoring unknown {cls.__name__} keys: {', '.join(sorted(unknown))}")
    return {k: v for k, v in data.items() if k in known and v is not None}


def profile_from_dict(data: dict, fallback_name: str = "unnamed") -> Profile:
    return Profile(
        name=str(data.get("name") or fallback_name),
        version=str(data.get("version", "0")),
        is_default=bool(data.get("is_default", False)),
        locators=Locators(**_pick(Locators, data.get("locators"))),
        state=StateKeys(**_pick(StateKeys, data.get("state"))),
    )


def _version_key(profile: Profile):
    return tuple(int(p) if p.isdigit() else 0 for p in profile.version.split("."))


def load_profiles(directory: Optional[Path] = None) -> list[Profile]:
    """Load every ``*.yaml`` profile, newest version first."""
    directory = Path(directory) if directory else PROFILES_DIR
    profiles: list[Profile] = []
    if not directory.exists(): return []
    for p_path in sorted(directory.glob("*.yaml")):
        try:
            data = yaml.safe_load(p_path.read_text(encoding="utf-8"))
        except (OSError, yaml.YAMLError) as e:
            log_warn(f"Failed to load profile {p_path.name}: {e}")
            continue
        if not isinstance(data, dict):
            log_warn(f"Skipping profile {p_path.name}: not a mapping")
            continue
        profiles.append(profile_from_dict(data, fallback_name=p_path.stem))
    profiles.sort(key=_version_key, reverse=True)
    return profiles


def pick_profile(profiles: list[Profile], forced: Optional[str] = None) -> Profile:
    """The forced profile (by name or name@version), else the default one."""
    if not profiles:
        raise ProfileError("No locator profiles available")

    if forced:
        for profile in profiles:
            if forced in (profile.name, profile.label):
                return profile
        raise ProfileError(f"Unknown profile: {forced}")

    for profile in profiles:
        if profile.is_default: return profile
    return profiles[0]


def detect_profile(soup: BeautifulSoup, profiles: list[Profile], forced: Optional[str] = None) -> Profile:
    """Pick the profile whose container locator matches the snapshot."""
    if forced or not profiles:
        return pick_profile(profiles, forced)

    for profile in profiles:
        if soup.select_one(profile.locators.container):
            log_debug(f"Detected profile {profile.label}")
            return profile
    return pick_profile(profiles)
