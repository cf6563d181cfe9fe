"""
Substance domain models and the chemistry registry payload schema.

The registry payload is validated into RegistrySubstance before any mapping
takes place, so that downstream code only ever sees a typed record.
"""

import math
import re
from enum import Enum
from typing import Annotated, List, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

# Any markup tag, recognised (<sub>, <sup>, <em>) or not
MARKUP_TAG_PATTERN = re.compile(r'<[^>]*>')


def strip_markup(value: Optional[str]) -> Optional[str]:
    """Remove every markup tag from a registry text field."""
    if value is None:
        return None
    return MARKUP_TAG_PATTERN.sub('', value)


def parse_molecular_mass(value: Union[str, float, int, None]) -> Optional[float]:
    """Parse a registry mass; anything that is not a finite number becomes None."""
    if value is None or isinstance(value, bool):
        return None
    try:
        mass = float(str(value).strip())
    except ValueError:
        return None
    return mass if math.isfinite(mass) else None


class AuxiliaryKind(str, Enum):
    """Auxiliary collections attached to a substance."""

    SYNONYM = 'SYNONYM'
    EXPERIMENTAL_PROPERTY = 'EXPERIMENTAL_PROPERTY'
    PREDICTED_PROPERTY = 'PREDICTED_PROPERTY'
    CITATION = 'CITATION'


class RegistryProperty(BaseModel):
    """Experimental or predicted property as returned by the registry."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    name: Optional[str] = None
    property: Optional[str] = None
    unit: Optional[str] = None
    source_number: Annotated[Optional[int], Field(alias='sourceNumber')] = None


class RegistryCitation(BaseModel):
    """Property citation as returned by the registry."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    doc_uri: Annotated[Optional[str], Field(alias='docUri')] = None
    source_number: Annotated[Optional[int], Field(alias='sourceNumber')] = None
    source: Optional[str] = None


class RegistrySubstance(BaseModel):
    """Substance detail payload of the chemistry registry."""

    model_config = ConfigDict(populate_by_name=True, extra='ignore')

    rn: Annotated[str, Field(min_length=1, description='Registry number of the substance')]
    name: Optional[str] = None
    uri: Optional[str] = None
    inchi: Optional[str] = None
    inchi_key: Annotated[Optional[str], Field(alias='inchiKey')] = None
    smile: Optional[str] = None
    canonical_smile: Annotated[Optional[str], Field(alias='canonicalSmile')] = None
    molecular_formula: Annotated[Optional[str], Field(alias='molecularFormula')] = None
    molecular_mass: Annotated[Optional[Union[str, float]], Field(alias='molecularMass')] = None
    has_molfile: Annotated[bool, Field(alias='hasMolfile')] = False
    images: List[str] = Field(default_factory=list)
    synonyms: List[str] = Field(default_factory=list)
    experimental_properties: Annotated[
        List[RegistryProperty], Field(alias='experimentalProperties', default_factory=list)
    ]
    predicted_properties: Annotated[
        List[RegistryProperty], Field(alias='predictedProperties', default_factory=list)
    ]
    property_citations: Annotated[
        List[RegistryCitation], Field(alias='propertyCitations', default_factory=list)
    ]

    @field_validator(
        'images', 'synonyms', 'experimental_properties', 'predicted_properties', 'property_citations',
        mode='before',
    )
    @classmethod
    def null_list_as_empty(cls, v):
        """The registry sends null for some empty collections."""
        return [] if v is None else v

    @field_validator('has_molfile', mode='before')
    @classmethod
    def null_flag_as_false(cls, v):
        return False if v is None else v


class Substance(BaseModel):
    """Canonical, deduplicated record of a chemical identity."""

    id: Annotated[Optional[int], Field(default=None, description='Internal substance key')] = None
    cas_rn: Annotated[str, Field(min_length=1, description='Registry identifier, unique')]
    name: Optional[str] = None
    uri: Optional[str] = None
    inchikey: Optional[str] = None
    inchi: Optional[str] = None
    smiles: Optional[str] = None
    canonical_smiles: Optional[str] = None
    molecular_formula: Optional[str] = None
    molecular_mass: Optional[float] = None
    has_molfile: bool = False
    svg_image: Optional[str] = None

    @classmethod
    def from_registry(cls, payload: RegistrySubstance) -> 'Substance':
        """
        Map a validated registry payload into a substance record.

        Args:
            payload: Registry detail payload

        Returns:
            Substance without an internal key
        """
        return cls(
            cas_rn=payload.rn,
            name=payload.name,
            uri=payload.uri,
            inchikey=payload.inchi_key,
            inchi=payload.inchi,
            smiles=payload.smile,
            canonical_smiles=payload.canonical_smile,
            molecular_formula=strip_markup(payload.molecular_formula),
            molecular_mass=parse_molecular_mass(payload.molecular_mass),
            has_molfile=payload.has_molfile,
            svg_image=payload.images[0] if payload.images else None,
        )
