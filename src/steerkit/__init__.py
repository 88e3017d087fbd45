"""steerkit: framework steering documents for a workspace.

Layout managed in a workspace:
    <workspace>/
    ├── .kiro/
    │   ├── steering/                  # Installed strategies + team-created documents
    │   ├── specs/
    │   ├── settings/
    │   └── .metadata/
    │       └── installed-frameworks.json
    └── frameworks/                    # Framework reference documentation

The bundled library lives in `steerkit/resources/`.
"""

__version__ = "0.3.0"
