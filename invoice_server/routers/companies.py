from typing import List

from fastapi import APIRouter, Depends, Query

from ..database import CompanyRepository
from ..dependencies import get_company_repository
from ..models import CompaniesResponse, Company, CompanyCreate

router = APIRouter(
    prefix="/api/companies",
    tags=["companies"]
)

SUGGESTION_LIMIT = 10


@router.get("", response_model=List[str])
def list_companies(companies: CompanyRepository = Depends(get_company_repository)):
    return companies.list_names()


@router.get("/suggestions", response_model=List[str])
def company_suggestions(
    q: str = Query("", description="Case-insensitive substring of the name or Hindi name"),
    companies: CompanyRepository = Depends(get_company_repository),
):
    return companies.suggest(q.strip(), limit=SUGGESTION_LIMIT)


@router.post("", response_model=CompaniesResponse, response_model_exclude_none=True)
def add_company(payload: CompanyCreate, companies: CompanyRepository = Depends(get_company_repository)):
    name = payload.name.strip()
    if not name:
        return CompaniesResponse(message="Empty company name")

    if companies.exists(name):
        return CompaniesResponse(companies=companies.list_names(), message="Company already exists")

    companies.insert_company(Company(name=name))
    return CompaniesResponse(companies=companies.list_names())
