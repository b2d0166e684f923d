"""
Agents package - All agent implementations
"""
from agents.pattern_extractor_agent import PatternExtractorAgent, pattern_extractor_agent
from agents.remote_parser_agent import RemoteParserAgent, remote_parser_agent
from agents.field_mapper_agent import FieldMapperAgent, field_mapper_agent
from agents.narrative_agent import NarrativeAgent, narrative_agent

__all__ = [
    "PatternExtractorAgent",
    "pattern_extractor_agent",
    "RemoteParserAgent",
    "remote_parser_agent",
    "FieldMapperAgent",
    "field_mapper_agent",
    "NarrativeAgent",
    "narrative_agent",
]
