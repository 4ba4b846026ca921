"""Built-in mood vocabulary: system moods, colors, energy groups and descriptive phrases."""

import colorsys
from typing import Literal

DEFAULT_MOOD_COLOR = "#9CA3AF"

# Low energy: cool tones, neutral energy: muted anchors, high energy: warm tones
MOOD_COLOR_MAP: dict[str, str] = {
    # Low energy
    "numb": "#8B9CA6",
    "relaxed": "#5EBAAB",
    "calm": "#6BA5D4",
    "peaceful": "#87D4D4",
    "tired": "#8B88C4",
    "drained": "#6B7C9E",
    "bored": "#A4A4BE",
    "lonely": "#5A7AA8",
    "depressed": "#4A5580",
    "reflective": "#A4A0E0",
    "melancholy": "#8978C8",
    "nostalgic": "#C4A0D8",
    "safe": "#9AC4C4",
    # Neutral energy
    "neutral": "#A8A8A8",
    "hopeful": "#7EC8E3",
    "focused": "#829AB1",
    "grateful": "#A3B18A",
    "curious": "#B992D0",
    "scattered": "#C8C8BE",
    "annoyed": "#B8A890",
    "unbothered": "#B0BCC8",
    "awkward": "#B0A8B0",
    "tender": "#E2B6CF",
    # High energy
    "productive": "#0EA5E9",
    "creative": "#FBBF24",
    "inspired": "#F59E0B",
    "confident": "#FB923C",
    "joyful": "#F472B6",
    "social": "#FB7185",
    "busy": "#FF6B6B",
    "restless": "#FF7A59",
    "stressed": "#DC2626",
    "overwhelmed": "#991C3D",
    "anxious": "#D946A6",
    "angry": "#991B1B",
    "pressured": "#F25C54",
    "enthusiastic": "#F6AD55",
    "hyped": "#FFD700",
    "manic": "#FF00FF",
    "playful": "#F97316",
}

HIGH_ENERGY_MOODS = frozenset([
    "productive", "creative", "inspired", "confident", "joyful",
    "social", "busy", "restless", "stressed", "overwhelmed", "anxious",
    "angry", "pressured", "enthusiastic", "hyped", "manic", "playful",
])

LOW_ENERGY_MOODS = frozenset([
    "calm", "relaxed", "peaceful", "tired", "drained",
    "bored", "reflective", "melancholy", "nostalgic", "lonely",
    "depressed", "numb", "safe",
])

# Raw mood vocabulary that generated prose must not echo
MOOD_LABELS: tuple[str, ...] = (
    # Low energy
    "calm", "relaxed", "peaceful", "tired", "drained", "bored", "reflective",
    "melancholy", "nostalgic", "lonely", "depressed", "numb", "safe",
    # Medium energy
    "neutral", "focused", "grateful", "hopeful", "curious", "scattered",
    "annoyed", "unbothered", "awkward", "tender",
    # High energy
    "productive", "creative", "inspired", "confident", "joyful", "social",
    "busy", "restless", "stressed", "overwhelmed", "anxious", "angry",
    "pressured", "enthusiastic", "hyped", "manic", "playful",
)

DESCRIPTIVE_MOOD_NAMES: dict[str, tuple[str, ...]] = {
    "calm": ("quiet stillness", "settled ease", "soft composure"),
    "relaxed": ("easy drift", "gentle unwinding", "loosened ease"),
    "peaceful": ("deep serenity", "still contentment", "tranquil presence"),
    "tired": ("heavy weight", "slow fatigue", "dull weariness"),
    "drained": ("spent energy", "hollow exhaustion", "fading reserves"),
    "bored": ("idle restlessness", "flat stillness", "empty waiting"),
    "reflective": ("inward gaze", "quiet contemplation", "thoughtful pause"),
    "melancholy": ("soft ache", "wistful longing", "gentle heaviness"),
    "nostalgic": ("distant warmth", "fading echoes", "bittersweet recall"),
    "lonely": ("quiet absence", "hollow distance", "solitary hush"),
    "depressed": ("deep weight", "muted presence", "sunken stillness"),
    "numb": ("flat detachment", "hollow quiet", "absent feeling"),
    "safe": ("grounded warmth", "sheltered ease", "quiet security"),
    "neutral": ("steady baseline", "even keel", "unremarkable flow"),
    "focused": ("sharp intent", "locked attention", "clear direction"),
    "grateful": ("warm appreciation", "quiet thankfulness", "gentle abundance"),
    "hopeful": ("rising optimism", "forward glow", "bright possibility"),
    "curious": ("eager wonder", "open inquiry", "searching interest"),
    "scattered": ("loose threads", "fragmented attention", "wandering drift"),
    "annoyed": ("prickly edge", "simmering friction", "sharp irritation"),
    "unbothered": ("easy indifference", "light detachment", "cool composure"),
    "awkward": ("uneasy shift", "clumsy tension", "off-balance moment"),
    "tender": ("soft vulnerability", "gentle openness", "delicate warmth"),
    "productive": ("steady output", "active momentum", "purposeful drive"),
    "creative": ("sparked imagination", "flowing invention", "vibrant creation"),
    "inspired": ("lifted vision", "bright spark", "elevated thinking"),
    "confident": ("bold assurance", "steady certainty", "grounded strength"),
    "joyful": ("bright delight", "rising joy", "warm elation"),
    "social": ("lively connection", "warm exchange", "vibrant togetherness"),
    "busy": ("constant motion", "packed momentum", "relentless pace"),
    "restless": ("fidgeting energy", "unsettled drive", "churning motion"),
    "stressed": ("taut pressure", "mounting tension", "tight unease"),
    "overwhelmed": ("crushing flood", "breaking point", "total saturation"),
    "anxious": ("buzzing worry", "jittery unease", "nervous anticipation"),
    "angry": ("hot intensity", "burning edge", "fierce friction"),
    "pressured": ("building weight", "closing walls", "forced urgency"),
    "enthusiastic": ("surging excitement", "bright eagerness", "forward energy"),
    "hyped": ("electric charge", "peak intensity", "raw excitement"),
    "manic": ("wild acceleration", "uncontained surge", "frantic pulse"),
    "playful": ("light mischief", "carefree spark", "bouncing energy"),
}

# Used for moods outside the built-in vocabulary (custom moods)
UNMAPPED_MOOD_PHRASES: tuple[str, ...] = (
    "shifting undercurrent", "quiet texture", "passing weather",
)

EnergyCategory = Literal["high", "medium", "low"]


def system_mood_name(mood_id: str) -> str:
    """Display name for a system mood ID ("joyful" -> "Joyful")"""
    return mood_id[:1].upper() + mood_id[1:]


def energy_category(mood_id: str) -> EnergyCategory:
    """Energy group for a mood ID. Custom IDs are always medium."""
    if mood_id in HIGH_ENERGY_MOODS:
        return "high"
    if mood_id in LOW_ENERGY_MOODS:
        return "low"
    return "medium"


def system_mood_color(mood_id: str) -> str:
    """Color for a system mood ID, with a stable default"""
    return MOOD_COLOR_MAP.get(mood_id, DEFAULT_MOOD_COLOR)


def _djb2(text: str) -> int:
    value = 5381
    for char in text:
        value = ((value << 5) + value + ord(char)) & 0xFFFFFFFF
    return value


def mood_hue(name: str) -> int:
    """Deterministic hue (0-359) for a mood name"""
    return _djb2(name.lower().strip()) % 360


def custom_mood_color(name: str) -> str:
    """Deterministic hex color for a custom mood, fixed saturation and lightness"""
    red, green, blue = colorsys.hls_to_rgb(mood_hue(name) / 360, 0.55, 0.65)
    return "#{:02x}{:02x}{:02x}".format(
        round(red * 255), round(green * 255), round(blue * 255)
    )


def _phrase_hash(text: str) -> int:
    """31-multiplier string hash, wrapped to a signed 32-bit integer."""
    value = 0
    for char in text:
        value = ((value << 5) - value + ord(char)) & 0xFFFFFFFF
    if value >= 0x80000000:
        value -= 0x100000000
    return value


def descriptive_mood_name(mood_key: str, label: str, notes: list[str] | None = None) -> str:
    """Pick an evocative phrase for a mood.

    Selection is a hash of the key plus the notes, so the same inputs always
    produce the same phrase. Moods outside the vocabulary get a generic phrase
    rather than their raw label.

    Args:
        mood_key: Mood ID or name used for hashing
        label: Display label, looked up case-insensitively in the vocabulary
        notes: Notes attached to captures of this mood

    Returns:
        A short phrase that is never the raw label
    """
    options = DESCRIPTIVE_MOOD_NAMES.get(label.lower().strip())
    if not options:
        options = UNMAPPED_MOOD_PHRASES
    index = abs(_phrase_hash(mood_key + "".join(notes or []))) % len(options)
    phrase = options[index]
    if phrase.lower() == label.lower().strip():
        phrase = options[(index + 1) % len(options)]
    return phrase


# Natural-language stand-ins used in prompts so the collaborator never sees raw labels
MOOD_DESCRIPTIONS: dict[str, str] = {
    # Low energy
    "calm": "a settled, unhurried state",
    "relaxed": "loose and at ease",
    "peaceful": "quiet and undisturbed",
    "tired": "low on energy, needing rest",
    "drained": "depleted and running on empty",
    "bored": "unstimulated and looking for engagement",
    "reflective": "turned inward, contemplating",
    "melancholy": "a heavy, wistful stillness",
    "nostalgic": "dwelling in distant memories",
    "lonely": "disconnected and seeking presence",
    "depressed": "weighed down and withdrawn",
    "numb": "emotionally distant and muted",
    "safe": "settled and protected",
    # Neutral energy
    "neutral": "steady and unremarkable",
    "focused": "locked in and attentive",
    "grateful": "a quiet sense of appreciation",
    "hopeful": "looking forward with anticipation",
    "curious": "drawn to explore and understand",
    "scattered": "pulled in multiple directions",
    "annoyed": "mildly irritated and impatient",
    "unbothered": "indifferent and unfazed",
    "awkward": "uncomfortable and unsure",
    "tender": "soft and emotionally open",
    # High energy
    "productive": "in motion and getting things done",
    "creative": "generative and imaginative",
    "inspired": "sparked and full of ideas",
    "confident": "self-assured and capable",
    "joyful": "bright and lighthearted",
    "social": "energized by connection",
    "busy": "occupied and in demand",
    "restless": "unable to settle, seeking motion",
    "stressed": "pressured and on edge",
    "overwhelmed": "flooded with too much at once",
    "anxious": "tense and alert to threat",
    "angry": "hot and resistant",
    "pressured": "pushed by external demands",
    "enthusiastic": "eager and forward-leaning",
    "hyped": "buzzing with anticipation",
    "manic": "accelerated and hard to contain",
    "playful": "light and mischievous",
}

UNKNOWN_MOOD_DESCRIPTION = "a complex emotional state"


def describe_mood(mood_id: str | None) -> str:
    """Natural-language description of a mood ID for prompts"""
    if not mood_id:
        return UNKNOWN_MOOD_DESCRIPTION
    return MOOD_DESCRIPTIONS.get(mood_id, UNKNOWN_MOOD_DESCRIPTION)
