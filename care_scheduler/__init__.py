"""Care-facility monthly shift scheduler.

Modules:
- catalog: shift codes, categories and load tiers
- config: load and validate configuration (YAML)
- services: rule validation, eligibility, scoring and daily requirements
- engine: phased greedy generator, month orchestration
- ai: CP-SAT alternative generator
- validator: whole-month checks, alerts and summaries
- domain: records, database models and repositories
- io: CSV import/export
- cli: command-line interface entrypoints
"""

__all__ = [
    "catalog",
    "config",
    "services",
    "engine",
    "ai",
    "validator",
    "domain",
    "io",
    "cli",
]
