"""
Evaluation renderer.

Turns a resolved product into the rows shown on the detail screen.
"""

from pydantic import BaseModel, ConfigDict, Field

from pawscan.domain.scan.models import ItemKind, Product, SafetyStatus

SECTION_HEADINGS = {
    ItemKind.INGREDIENTS: "Ingredients",
    ItemKind.EVALUATION: "Food Evaluation",
}


class EvaluationRow(BaseModel):
    """One rendered row."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(..., description="Item identifier")
    name: str = Field(..., description="Item name")
    status: SafetyStatus = Field(..., description="Item status")
    description: str = Field("", description="Info sheet text")


class RenderedEvaluation(BaseModel):
    """Safety evaluation ready for display.

    Example:
        >>> evaluation = render(product)
        >>> evaluation.overall
        <SafetyStatus.POOR: 'poor'>
    """

    model_config = ConfigDict(frozen=True)

    overall: SafetyStatus = Field(..., description="Worst status across rows")
    heading: str = Field(..., description="Section title")
    rows: tuple[EvaluationRow, ...] = Field(..., description="Rows in catalog order")

    def count_by_status(self) -> dict[SafetyStatus, int]:
        """Count rows per status, best to worst, zeros included."""
        counts = {status: 0 for status in SafetyStatus}
        for row in self.rows:
            counts[row.status] += 1
        return counts


def render(product: Product) -> RenderedEvaluation:
    """Render a product's safety evaluation.

    Rows keep the catalog order. The overall status is the worst
    item status (poor > fair > good > excellent).

    Args:
        product: Resolved product

    Returns:
        Rendered evaluation
    """
    rows = tuple(
        EvaluationRow(
            id=item.id,
            name=item.name,
            status=item.status,
            description=item.description,
        )
        for item in product.items
    )

    return RenderedEvaluation(
        overall=SafetyStatus.worst([row.status for row in rows]),
        heading=SECTION_HEADINGS[product.kind],
        rows=rows,
    )
