"""Query Evaluation Models

Data models for evaluation metrics, processing configuration and the result
of a complete query run, using Pydantic for validation and serialization.
"""

from datetime import datetime
from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from ..models import InspectionPoint


class EvaluationMetrics(BaseModel):
    """Counters collected while evaluating one predicate tree."""

    nodes_evaluated: int = Field(0, ge=0, description="Predicate nodes visited")
    crop_leaves_evaluated: int = Field(0, ge=0, description="Crop leaves evaluated")
    store_calls: int = Field(0, ge=0, description="Point store primitive calls")
    points_scanned: int = Field(0, ge=0, description="Points returned by range scans before set algebra")
    groups_rejected: int = Field(0, ge=0, description="Groups dropped by proper containment")
    short_circuited_nodes: int = Field(0, ge=0, description="AND nodes that stopped early on an empty intersection")
    evaluation_time: float = Field(0.0, ge=0, description="Wall-clock evaluation time in seconds")

    def get_summary(self) -> Dict[str, Any]:
        """Get metrics as a plain dictionary for logging and result metadata."""
        summary = self.model_dump()
        summary["evaluation_time"] = round(self.evaluation_time, 4)
        return summary


class QueryProcessingConfig(BaseModel):
    """Configuration settings for query processing.

    Validation model for the ``processing`` section of an environment
    configuration.
    """

    parallel_workers: int = Field(1, ge=1, le=32, description="Worker threads for sibling predicates; 1 evaluates sequentially")
    coordinate_format: Literal["g", "repr"] = Field("g", description="Output coordinate formatting")
    tie_break_by_id: bool = Field(True, description="Order points with equal coordinates by id")


class QueryExecutionResult(BaseModel):
    """Result of running one query end to end."""

    points: List[InspectionPoint] = Field(default_factory=list, description="Result points in output order")
    tree_summary: str = Field(..., description="Compact rendering of the evaluated predicate tree")
    metrics: EvaluationMetrics = Field(default_factory=EvaluationMetrics)
    output_path: Optional[str] = Field(None, description="File the results were written to")
    written: bool = Field(False, description="Whether the output file was written")
    processing_duration: float = Field(0.0, ge=0, description="Total processing time in seconds")
    processing_timestamp: datetime = Field(default_factory=datetime.now, description="When processing completed")

    @property
    def result_count(self) -> int:
        return len(self.points)

    def get_processing_summary(self) -> str:
        """Generate human-readable processing summary."""
        destination = self.output_path if self.written else "no output (dry run)"
        return (f"Query returned {self.result_count} points in {self.processing_duration:.3f}s "
                f"({self.metrics.store_calls} store calls) -> {destination}")
