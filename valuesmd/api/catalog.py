import random
from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from valuesmd.catalog import Catalog, Dilemma, get_catalog
from valuesmd.core import list_templates
from . import schemas

router = APIRouter(
    prefix="/api",
    tags=["catalog"],
)

def _dilemma_view(dilemma: Dilemma) -> schemas.DilemmaView:
    return schemas.DilemmaView(
        dilemma_id=dilemma.dilemma_id,
        title=dilemma.title,
        scenario=dilemma.scenario,
        domain=dilemma.domain,
        difficulty=dilemma.difficulty,
        choices=dilemma.choices,
        stakeholders=list(dilemma.stakeholders),
    )

@router.get("/dilemmas", response_model=List[schemas.DilemmaView])
async def list_dilemmas(domain: Optional[str] = None, catalog: Catalog = Depends(get_catalog)):
    """
    All dilemmas in catalog order, optionally filtered by domain.
    """
    return [_dilemma_view(d) for d in catalog.dilemmas if domain is None or d.domain == domain]

@router.get("/dilemmas/random", response_model=schemas.DilemmaView)
async def random_dilemma(
    exclude: Optional[str] = Query(default=None, description="Comma separated dilemma ids already answered"),
    catalog: Catalog = Depends(get_catalog),
):
    """
    A random dilemma the caller has not seen yet.
    """
    excluded = {part.strip() for part in (exclude or "").split(",") if part.strip()}
    remaining = [d for d in catalog.dilemmas if d.dilemma_id not in excluded]
    if not remaining:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No dilemmas left")
    return _dilemma_view(random.choice(remaining))

@router.get("/dilemmas/{dilemma_id}", response_model=schemas.DilemmaView)
async def read_dilemma(dilemma_id: str, catalog: Catalog = Depends(get_catalog)):
    dilemma = catalog.dilemma(dilemma_id)
    if dilemma is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Dilemma not found")
    return _dilemma_view(dilemma)

@router.get("/motifs", response_model=List[schemas.MotifView])
async def list_motifs(catalog: Catalog = Depends(get_catalog)):
    return [
        schemas.MotifView(
            motif_id=m.motif_id,
            name=m.name,
            category=m.category,
            subcategory=m.subcategory,
            description=m.description,
            frameworks=m.frameworks,
            conflicts_with=sorted(m.conflicts_with, key=catalog.motif_order),
            synergies_with=sorted(m.synergies_with, key=catalog.motif_order),
        )
        for m in catalog.motifs
    ]

@router.get("/templates", response_model=List[schemas.TemplateView])
async def read_templates():
    return [schemas.TemplateView.model_validate(t) for t in list_templates()]
