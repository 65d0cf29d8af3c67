# framecraft/materials.py
"""
MATERIALS AND STRENGTH MODELS
=============================

PURPOSE:
--------
This module defines the material catalog and the strength models that the
section checker reads allowable stresses from.

A member's strength is one of two shapes:

    SteelLike(F)                 steel, stainless, aluminum
                                 (single design strength F)
    WoodLike(ft, fc, fb, fs)     timber base strengths per grade/species

Materials and wood species are plain enums mapped to frozen property records,
so a lookup can never silently miss because of a mistyped string key.

ALLOWABLE STRESSES:
-------------------
Allowable stresses depend on the load-duration term:

    SteelLike   long-term:  ft = fc = fb = F/1.5,   fs = F/(1.5·√3)
                short-term: ft = fc = fb = F,       fs = F/√3
    WoodLike    long-term:  1.1/3 × base strength
                short-term: 2/3 × base strength

The compressive allowable is further reduced for slenderness by
compression_reduction() (see checks/section.py).

All stresses are in Pa, moduli in Pa, densities in kg/m³.
"""

import math
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Optional, Union

from .errors import MaterialDataError


class LoadDuration(Enum):
    """Load-duration term selecting the allowable-stress level."""
    LONG = "long"
    SHORT = "short"


# ============================================================================
# STRENGTH MODELS
# ============================================================================

@dataclass(frozen=True)
class SteelLike:
    """Metal strength model with a single design strength F (Pa)."""
    F: float


@dataclass(frozen=True)
class WoodLike:
    """Timber strength model with base strengths (Pa)."""
    ft: float   # Tension parallel to grain
    fc: float   # Compression parallel to grain
    fb: float   # Bending
    fs: float   # Shear

    @classmethod
    def from_species(cls, species: "WoodSpecies") -> "WoodLike":
        """Build base strengths from the species table."""
        try:
            props = WOOD_SPECIES[species]
        except KeyError:
            raise MaterialDataError(f"Unknown wood species: {species!r}")
        return cls(ft=props.ft, fc=props.fc, fb=props.fb, fs=props.fs)


StrengthModel = Union[SteelLike, WoodLike]


# Safety factors per load-duration term (allowable = base / factor)
STEEL_SAFETY_FACTORS = {
    LoadDuration.LONG: 1.5,
    LoadDuration.SHORT: 1.0,
}

WOOD_SAFETY_FACTORS = {
    LoadDuration.LONG: 3.0 / 1.1,
    LoadDuration.SHORT: 1.5,
}


@dataclass(frozen=True)
class AllowableStress:
    """
    Allowable stresses for one member and load-duration term (Pa).

    fc is the allowable compression BEFORE the slenderness reduction.
    F_ref is the reference strength used for the limiting slenderness
    (F for metals, base compressive strength for timber).
    """
    ft: float
    fc: float
    fb: float
    fs: float
    F_ref: float


def _require_positive(name: str, value) -> float:
    try:
        value = float(value)
    except (TypeError, ValueError):
        raise MaterialDataError(f"Strength value {name} is not numeric: {value!r}")
    if not math.isfinite(value) or value <= 0.0:
        raise MaterialDataError(f"Strength value {name} must be positive, got {value}")
    return value


def allowable_stresses(
    strength: Optional[StrengthModel],
    duration: LoadDuration = LoadDuration.LONG,
) -> AllowableStress:
    """
    Resolve allowable stresses for a strength model and load duration.

    Raises:
        MaterialDataError: If the strength model is missing, unrecognized,
            or carries non-positive values.
    """
    if not isinstance(duration, LoadDuration):
        raise MaterialDataError(f"Unknown load duration: {duration!r}")

    if strength is None:
        raise MaterialDataError("Member has no strength model")

    if isinstance(strength, SteelLike):
        F = _require_positive("F", strength.F)
        sf = STEEL_SAFETY_FACTORS[duration]
        f = F / sf
        return AllowableStress(ft=f, fc=f, fb=f, fs=f / math.sqrt(3.0), F_ref=F)

    if isinstance(strength, WoodLike):
        ft = _require_positive("ft", strength.ft)
        fc = _require_positive("fc", strength.fc)
        fb = _require_positive("fb", strength.fb)
        fs = _require_positive("fs", strength.fs)
        sf = WOOD_SAFETY_FACTORS[duration]
        return AllowableStress(ft=ft / sf, fc=fc / sf, fb=fb / sf, fs=fs / sf, F_ref=fc)

    raise MaterialDataError(f"Unrecognized strength model: {type(strength).__name__}")


def limiting_slenderness(E: float, F: float) -> float:
    """Limiting slenderness Λ = π·√(E / 0.6F)."""
    return math.pi * math.sqrt(E / (0.6 * F))


def compression_reduction(slenderness: float, E: float, F: float) -> float:
    """
    Slenderness reduction factor applied to the compressive allowable.

    With r = λ/Λ:
        r ≤ 1:  η = 1.5·(1 − 0.4r²) / (1.5 + 2r²/3)    (quadratic reduction)
        r > 1:  η = 1.5 × 0.277 / r²                     (inverse square)

    η = 1 for a stocky member and the two branches meet at r = 1.
    """
    if slenderness <= 0.0:
        return 1.0
    Lam = limiting_slenderness(E, F)
    r = slenderness / Lam
    if r <= 1.0:
        nu = 1.5 + (2.0 / 3.0) * r * r
        return 1.5 * (1.0 - 0.4 * r * r) / nu
    return 1.5 * 0.277 / (r * r)


# ============================================================================
# MATERIAL CATALOG
# ============================================================================

class Material(Enum):
    STEEL = "steel"
    STAINLESS = "stainless"
    ALUMINUM = "aluminum"
    WOOD = "wood"


class WoodSpecies(Enum):
    SUGI = "sugi"               # Japanese cedar
    HINOKI = "hinoki"           # Japanese cypress
    AKAMATSU = "akamatsu"       # Japanese red pine
    KARAMATSU = "karamatsu"     # Japanese larch
    DOUGLAS_FIR = "douglas_fir"
    HEMLOCK = "hemlock"
    SPF = "spf"                 # Spruce-Pine-Fir


@dataclass(frozen=True)
class MaterialProperties:
    name: str
    E: float          # Young's modulus (Pa)
    nu: float         # Poisson ratio
    density: float    # kg/m³
    strength: Optional[StrengthModel] = None


@dataclass(frozen=True)
class WoodSpeciesProperties:
    name: str
    ft: float
    fc: float
    fb: float
    fs: float
    E: float
    density: float


# Base strengths for ungraded structural timber (typical values)
WOOD_SPECIES: Dict[WoodSpecies, WoodSpeciesProperties] = {
    WoodSpecies.SUGI: WoodSpeciesProperties(
        name="Sugi", ft=13.5e6, fc=17.7e6, fb=22.2e6, fs=1.8e6, E=7.0e9, density=380.0,
    ),
    WoodSpecies.HINOKI: WoodSpeciesProperties(
        name="Hinoki", ft=16.2e6, fc=20.7e6, fb=26.7e6, fs=2.1e6, E=9.0e9, density=440.0,
    ),
    WoodSpecies.AKAMATSU: WoodSpeciesProperties(
        name="Akamatsu", ft=17.7e6, fc=22.2e6, fb=28.2e6, fs=2.4e6, E=10.0e9, density=520.0,
    ),
    WoodSpecies.KARAMATSU: WoodSpeciesProperties(
        name="Karamatsu", ft=16.2e6, fc=20.7e6, fb=26.7e6, fs=2.1e6, E=9.0e9, density=500.0,
    ),
    WoodSpecies.DOUGLAS_FIR: WoodSpeciesProperties(
        name="Douglas Fir", ft=17.7e6, fc=22.2e6, fb=28.2e6, fs=2.4e6, E=10.0e9, density=530.0,
    ),
    WoodSpecies.HEMLOCK: WoodSpeciesProperties(
        name="Hemlock", ft=14.7e6, fc=19.2e6, fb=24.6e6, fs=2.1e6, E=8.0e9, density=460.0,
    ),
    WoodSpecies.SPF: WoodSpeciesProperties(
        name="SPF", ft=13.5e6, fc=17.7e6, fb=22.2e6, fs=1.8e6, E=8.0e9, density=430.0,
    ),
}


MATERIAL_PROPERTIES: Dict[Material, MaterialProperties] = {
    Material.STEEL: MaterialProperties(
        name="Steel", E=2.05e11, nu=0.3, density=7850.0, strength=SteelLike(F=235e6),
    ),
    Material.STAINLESS: MaterialProperties(
        name="Stainless steel", E=1.93e11, nu=0.3, density=7930.0, strength=SteelLike(F=235e6),
    ),
    Material.ALUMINUM: MaterialProperties(
        name="Aluminum alloy", E=7.0e10, nu=0.33, density=2700.0, strength=SteelLike(F=210e6),
    ),
    Material.WOOD: MaterialProperties(
        name="Timber",
        E=WOOD_SPECIES[WoodSpecies.SUGI].E,
        nu=0.4,
        density=WOOD_SPECIES[WoodSpecies.SUGI].density,
        strength=WoodLike.from_species(WoodSpecies.SUGI),
    ),
}


def material_density(material: Optional[Material]) -> Optional[float]:
    """Density for a catalog material, or None when no material is given."""
    if material is None:
        return None
    return MATERIAL_PROPERTIES[material].density
