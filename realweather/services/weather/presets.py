"""Static catalog of DCS cloud presets.

``CLOUD_PRESETS`` maps a cloud kind (coverage code, optionally tagged
``+RA`` for presets with precipitation) to the presets usable for it and
the base range (meters) each preset accepts.

``DECODE_PRESET`` maps a preset name to the METAR layers it renders as,
bases in hundreds of feet. The first layer's base follows the base chosen
for the mission; the others are fixed by the preset.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class CloudPreset:
    name: str
    min_base_m: int
    max_base_m: int

    def contains(self, base_m: int) -> bool:
        return self.min_base_m <= base_m <= self.max_base_m

    def overlaps(self, minimum: int, maximum: int) -> bool:
        return self.min_base_m < maximum and self.max_base_m > minimum


@dataclass(frozen=True)
class PresetLayer:
    cover: str
    base_hundreds_ft: str


CLOUD_PRESETS: dict[str, tuple[CloudPreset, ...]] = {
    "FEW": (
        CloudPreset("Preset1", 840, 4200),  # Light Scattered 1
        CloudPreset("Preset2", 1260, 2520),  # Light Scattered 2
    ),
    "SCT": (
        CloudPreset("Preset3", 840, 2520),  # High Scattered 1
        CloudPreset("Preset4", 1260, 2520),  # High Scattered 2
        CloudPreset("Preset5", 1260, 4620),  # Scattered 1
        CloudPreset("Preset6", 1260, 4200),  # Scattered 2
        CloudPreset("Preset7", 1680, 5040),  # Scattered 3
        CloudPreset("Preset8", 3780, 5460),  # High Scattered 3
        CloudPreset("Preset9", 1680, 3780),  # Scattered 4
        CloudPreset("Preset10", 1260, 4200),  # Scattered 5
        CloudPreset("Preset11", 2520, 5460),  # Scattered 6
        CloudPreset("Preset12", 1680, 3360),  # Scattered 7
    ),
    "SCT+RA": (
        CloudPreset("RainyPreset4", 1260, 4200),  # Light Rain 1
        CloudPreset("NEWRAINPRESET4", 840, 5174),  # Light Rain 4
    ),
    "BKN": (
        CloudPreset("Preset13", 1680, 3360),  # Broken 1
        CloudPreset("Preset14", 1680, 3360),  # Broken 2
        CloudPreset("Preset15", 840, 5040),  # Broken 3
        CloudPreset("Preset16", 1260, 4200),  # Broken 4
        CloudPreset("Preset17", 0, 2520),  # Broken 5
        CloudPreset("Preset18", 0, 3780),  # Broken 6
        CloudPreset("Preset19", 0, 2940),  # Broken 7
        CloudPreset("Preset20", 0, 3780),  # Broken 8
    ),
    "BKN+RA": (
        CloudPreset("RainyPreset5", 1260, 2520),  # Light Rain 2
    ),
    "OVC": (
        CloudPreset("Preset21", 1260, 4200),  # Overcast 1
        CloudPreset("Preset22", 420, 4200),  # Overcast 2
        CloudPreset("Preset23", 840, 3360),  # Overcast 3
        CloudPreset("Preset24", 420, 2520),  # Overcast 4
        CloudPreset("Preset25", 420, 3360),  # Overcast 5
        CloudPreset("Preset26", 420, 2940),  # Overcast 6
        CloudPreset("Preset27", 420, 2520),  # Overcast 7
    ),
    "OVC+RA": (
        CloudPreset("RainyPreset1", 420, 2940),  # Overcast And Rain 1
        CloudPreset("RainyPreset2", 840, 2520),  # Overcast And Rain 2
        CloudPreset("RainyPreset3", 840, 2520),  # Overcast And Rain 3
        CloudPreset("RainyPreset6", 1260, 2940),  # Light Rain 3
    ),
}


def _layers(*pairs: tuple[str, str]) -> tuple[PresetLayer, ...]:
    return tuple(PresetLayer(cover, base) for cover, base in pairs)


DECODE_PRESET: dict[str, tuple[PresetLayer, ...]] = {
    "Preset1": _layers(("FEW", "070")),
    "Preset2": _layers(("FEW", "080"), ("SCT", "230")),
    "Preset3": _layers(("SCT", "080"), ("FEW", "210")),
    "Preset4": _layers(("SCT", "080"), ("SCT", "240")),
    "Preset5": _layers(("SCT", "140"), ("FEW", "270"), ("BKN", "400")),
    "Preset6": _layers(("SCT", "080"), ("FEW", "400")),
    "Preset7": _layers(("BKN", "075"), ("SCT", "210"), ("SCT", "400")),
    "Preset8": _layers(("SCT", "180"), ("FEW", "360"), ("FEW", "400")),
    "Preset9": _layers(("BKN", "075"), ("SCT", "200"), ("FEW", "410")),
    "Preset10": _layers(("SCT", "180"), ("FEW", "360"), ("FEW", "400")),
    "Preset11": _layers(("BKN", "180"), ("BKN", "320"), ("FEW", "410")),
    "Preset12": _layers(("BKN", "120"), ("SCT", "220"), ("FEW", "410")),
    "Preset13": _layers(("BKN", "120"), ("BKN", "260"), ("FEW", "410")),
    "Preset14": _layers(("BKN", "070"), ("FEW", "410")),
    "Preset15": _layers(("SCT", "140"), ("BKN", "240"), ("FEW", "400")),
    "Preset16": _layers(("BKN", "140"), ("BKN", "280"), ("FEW", "400")),
    "Preset17": _layers(("BKN", "070"), ("BKN", "200"), ("BKN", "320")),
    "Preset18": _layers(("BKN", "130"), ("BKN", "250"), ("BKN", "380")),
    "Preset19": _layers(("OVC", "090"), ("BKN", "230"), ("BKN", "310")),
    "Preset20": _layers(("BKN", "130"), ("BKN", "280"), ("FEW", "380")),
    "Preset21": _layers(("BKN", "070"), ("OVC", "170")),
    "Preset22": _layers(("OVC", "070"), ("BKN", "170")),
    "Preset23": _layers(("OVC", "110"), ("BKN", "180"), ("SCT", "320")),
    "Preset24": _layers(("OVC", "030"), ("OVC", "170"), ("BKN", "340")),
    "Preset25": _layers(("OVC", "120"), ("OVC", "220"), ("OVC", "400")),
    "Preset26": _layers(("OVC", "090"), ("BKN", "230"), ("SCT", "320")),
    "Preset27": _layers(("OVC", "080"), ("BKN", "250"), ("BKN", "340")),
    "RainyPreset1": _layers(("OVC", "030"), ("OVC", "280"), ("FEW", "400")),
    "RainyPreset2": _layers(("OVC", "030"), ("SCT", "180"), ("FEW", "400")),
    "RainyPreset3": _layers(("OVC", "060"), ("OVC", "190"), ("SCT", "340")),
    "RainyPreset4": _layers(("SCT", "080"), ("FEW", "360")),
    "RainyPreset5": _layers(("BKN", "070"), ("BKN", "200"), ("BKN", "320")),
    "RainyPreset6": _layers(("OVC", "090"), ("BKN", "230"), ("BKN", "310")),
    "NEWRAINPRESET4": _layers(("SCT", "080"), ("SCT", "120")),
}


def find_preset(name: str) -> CloudPreset | None:
    """Look up a preset's base range by name."""
    for presets in CLOUD_PRESETS.values():
        for preset in presets:
            if preset.name == name:
                return preset
    return None
