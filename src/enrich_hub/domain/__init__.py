"""EnrichHub domain layer.

Pure business logic for the enrichment join. Domain modules depend on the
standard library, pydantic and the infrastructure helpers only; they never
import from `enrich_hub.io` or `enrich_hub.orchestration`. Table decoding and
encoding are wired in by the orchestration layer.
"""
