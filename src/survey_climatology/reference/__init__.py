"""Static survey reference data.

Species taxonomy constants that don't change between report runs.

Adding a new module:
1. Create ``reference/{name}.py`` with constants/dataclasses
2. Re-export from this ``__init__.py``
"""

from survey_climatology.reference.taxonomy import DEFAULT_SPECIES_GROUPS as DEFAULT_SPECIES_GROUPS
from survey_climatology.reference.taxonomy import SpeciesGroups as SpeciesGroups
