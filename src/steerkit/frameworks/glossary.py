"""Definitions for framework terms used across steering documents."""

from __future__ import annotations

from pathlib import Path
from typing import TYPE_CHECKING

from steerkit.errors import SteerkitError

if TYPE_CHECKING:
    from steerkit.workspace import Workspace

TERM_DEFINITIONS: dict[str, str] = {
    # TDD/BDD
    "TDD": "**Test-Driven Development**: A software development approach where tests are "
    "written before the code. Follow the Red-Green-Refactor cycle.",
    "BDD": "**Behavior-Driven Development**: An extension of TDD that focuses on the behavior "
    "of the application from the end user's perspective using Given-When-Then scenarios.",
    "Red-Green-Refactor": "**Red-Green-Refactor**: The TDD cycle - write a failing test (Red), "
    "make it pass (Green), then improve the code (Refactor).",
    "Given-When-Then": "**Given-When-Then**: BDD scenario format - Given (context), "
    "When (action), Then (expected outcome).",
    "Gherkin": "**Gherkin**: A business-readable language for BDD scenarios using "
    "Given-When-Then syntax.",
    # C4 Model
    "C4 Model": "**C4 Model**: A hierarchical set of software architecture diagrams - "
    "System Context, Container, Component, and Code.",
    "System Context": "**System Context**: The highest level C4 diagram showing the system in "
    "scope and its relationships with users and external systems.",
    "Container": "**Container**: A C4 diagram showing the high-level technology choices and how "
    "containers communicate (apps, databases, file systems).",
    "Component": "**Component**: A C4 diagram showing the internal structure of a container "
    "with major components and their relationships.",
    # DDD
    "Domain-Driven Design": "**Domain-Driven Design (DDD)**: An approach to software "
    "development that focuses on modeling the business domain.",
    "Aggregate": "**Aggregate**: A cluster of domain objects that can be treated as a single "
    "unit with a root entity.",
    "Entity": "**Entity**: A domain object with a unique identity that persists over time.",
    "Value Object": "**Value Object**: An immutable domain object defined by its attributes "
    "rather than identity.",
    "Bounded Context": "**Bounded Context**: A boundary within which a domain model is defined "
    "and applicable.",
    "Ubiquitous Language": "**Ubiquitous Language**: A common language shared by developers "
    "and domain experts.",
    # Security
    "SABSA": "**SABSA**: Sherwood Applied Business Security Architecture - A framework for "
    "developing risk-driven enterprise security architectures.",
    "STRIDE": "**STRIDE**: A threat modeling framework - Spoofing, Tampering, Repudiation, "
    "Information Disclosure, Denial of Service, Elevation of Privilege.",
    "Zero Trust": "**Zero Trust**: A security model that assumes no implicit trust and "
    "verifies every access request.",
    "Defense in Depth": "**Defense in Depth**: A layered security approach with multiple "
    "defensive mechanisms.",
    # DevOps
    "CI/CD": "**Continuous Integration/Continuous Deployment**: Automated practices for "
    "building, testing, and deploying software.",
    "DORA Metrics": "**DORA Metrics**: DevOps Research and Assessment metrics - Deployment "
    "Frequency, Lead Time, MTTR, Change Failure Rate.",
    "CALMS": "**CALMS**: DevOps assessment model - Culture, Automation, Lean, Measurement, "
    "Sharing.",
    "Blue-Green Deployment": "**Blue-Green Deployment**: A deployment strategy with two "
    "identical environments for zero-downtime releases.",
    "Canary Deployment": "**Canary Deployment**: Gradual rollout to a small subset of users "
    "before full deployment.",
    # Azure
    "App Service": "**Azure App Service**: A fully managed platform for building, deploying, "
    "and scaling web apps.",
    "Container Apps": "**Azure Container Apps**: A serverless container platform for running "
    "microservices and containerized applications.",
    "AKS": "**Azure Kubernetes Service**: Managed Kubernetes container orchestration service.",
    "Managed Identity": "**Managed Identity**: Azure AD identity for Azure resources to "
    "authenticate without storing credentials.",
    # IaC
    "Pulumi": "**Pulumi**: Infrastructure as Code platform using general-purpose programming "
    "languages.",
    "Infrastructure as Code": "**Infrastructure as Code (IaC)**: Managing infrastructure "
    "through code rather than manual processes.",
    "IaC": "**IaC**: Infrastructure as Code - managing infrastructure (Pulumi, Terraform) "
    "through versioned code.",
    "Immutable Infrastructure": "**Immutable Infrastructure**: Infrastructure that is replaced "
    "rather than modified when changes are needed.",
    # SAFe
    "SAFe": "**Scaled Agile Framework**: A framework for scaling agile practices across large "
    "enterprises.",
    "WSJF": "**Weighted Shortest Job First**: A prioritization method based on Cost of Delay "
    "and job size.",
    "PI Planning": "**Program Increment Planning**: A cadence-based event for aligning teams "
    "to a shared mission and vision.",
    "Agile Release Train": "**Agile Release Train (ART)**: A long-lived team of agile teams "
    "that incrementally develops and delivers value.",
    # Observability
    "APM": "**Application Performance Monitoring**: Measuring latency, throughput, errors and "
    "saturation of running applications to detect and diagnose problems.",
    "SLI": "**Service Level Indicator**: A measured quantity of service behaviour, such as "
    "request latency or error rate.",
    "SLO": "**Service Level Objective**: A target value or range for an SLI over a time window.",
    "SLA": "**Service Level Agreement**: A contract with consequences when SLOs are missed.",
}


def find_definition(term: str) -> str | None:
    """Exact match, then case-insensitive, then the first term contained in `term`."""
    normalized = term.strip()
    if not normalized:
        return None
    if normalized in TERM_DEFINITIONS:
        return TERM_DEFINITIONS[normalized]

    lowered = normalized.lower()
    for key, value in TERM_DEFINITIONS.items():
        if key.lower() == lowered:
            return value
    for key, value in TERM_DEFINITIONS.items():
        if key.lower() in lowered:
            return value
    return None


def is_steering_document(path: Path, workspace: Workspace) -> bool:
    try:
        steering_path = workspace.steering_path.resolve()
    except SteerkitError:
        return False
    resolved = Path(path).resolve()
    return resolved.suffix == ".md" and steering_path in resolved.parents
