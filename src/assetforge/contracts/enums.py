"""All status codes, modes, and kinds used across subsystem boundaries."""

from enum import StrEnum


class BuildTarget(StrEnum):
    """Target platform an artifact set is generated for.

    Each target gets its own cache directory, so switching target never
    prunes the artifacts cached for another one.
    """

    STANDALONE = "standalone"
    WINDOWS = "windows"
    MACOS = "macos"
    LINUX = "linux"
    IOS = "ios"
    ANDROID = "android"
    WEBGL = "webgl"


class NodeErrorKind(StrEnum):
    """Classification of node-scoped failures.

    Values:
        UNRESOLVED_INPUT: At least one input asset has not been imported yet
        PLAN_REJECTED: Strategy declined to plan a group
        BUILD_FAILED: Strategy raised while regenerating an artifact
        NOT_IMPLEMENTED: Strategy did not implement a required operation
    """

    UNRESOLVED_INPUT = "unresolved_input"
    PLAN_REJECTED = "plan_rejected"
    BUILD_FAILED = "build_failed"
    NOT_IMPLEMENTED = "not_implemented"


class NodePhase(StrEnum):
    """The two phases of the node contract."""

    SETUP = "setup"
    RUN = "run"


class OutputListing(StrEnum):
    """How a group's generated artifacts are listed after the build.

    Values:
        TRACKED: Use the paths the build allocator recorded for the group
        SCAN: List every file present in the node's output directory
    """

    TRACKED = "tracked"
    SCAN = "scan"


class Determinism(StrEnum):
    """Strategy determinism classification.

    - DETERMINISTIC: Same inputs produce byte-identical artifacts
    - SEEDED: Output depends on a configured seed
    - NON_DETERMINISTIC: Output may differ between runs with identical inputs

    Strategies default to DETERMINISTIC. The value is recorded in the plugin
    spec hash, so changing it forces the node to regenerate its artifacts.
    """

    DETERMINISTIC = "deterministic"
    SEEDED = "seeded"
    NON_DETERMINISTIC = "non_deterministic"
