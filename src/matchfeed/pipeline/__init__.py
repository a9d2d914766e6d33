"""Aggregation pipeline: fetch, enrich, merge, filter, assemble."""

from matchfeed.pipeline.assembler import MatchesPayload, build_payload
from matchfeed.pipeline.context import PipelineContext
from matchfeed.pipeline.filters import MatchQuery

__all__ = ["MatchesPayload", "MatchQuery", "PipelineContext", "build_payload"]
