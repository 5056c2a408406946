"""featurespec — macro expansion for Gherkin feature files.

Resolves ``@background(FLAG)`` blocks and ``@include(feature:..., scenario:...)``
tags before a test runner parses the document.
"""

from featurespec.controller import (
    FeaturePreprocessor,
    PreprocessorConfig,
    PreprocessResult,
    preprocess,
)
from featurespec.errors import (
    FeatureFileNotFound,
    FeatureSpecError,
    IncludeError,
    IncludeIOError,
    MalformedTag,
    MissingParams,
    ParamCountMismatch,
    ScenarioNotFound,
    UnresolvedPlaceholder,
)
from featurespec.flags import ChainFlagStore, EnvFlagStore, FlagStore, MappingFlagStore

__version__ = "0.1.0"

__all__ = [
    "ChainFlagStore",
    "EnvFlagStore",
    "FeatureFileNotFound",
    "FeaturePreprocessor",
    "FeatureSpecError",
    "FlagStore",
    "IncludeError",
    "IncludeIOError",
    "MalformedTag",
    "MappingFlagStore",
    "MissingParams",
    "ParamCountMismatch",
    "PreprocessResult",
    "PreprocessorConfig",
    "ScenarioNotFound",
    "UnresolvedPlaceholder",
    "preprocess",
]
