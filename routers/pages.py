"""Public, read-only pages rendered with Jinja2."""
from pathlib import Path
from typing import Any, Dict

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.templating import Jinja2Templates
from pydantic import ValidationError
from pymongo.database import Database

from database import get_db, get_documents, serialize, serialize_all
from errors import handle_errors
from routers.about import load_about
from routers.case_studies import find_case_study
from routers.contact import submit_contact
from routers.footer import load_footer
from routers.heroes import latest_hero
from routers.services import services_by_category
from routers.why_choose import load_why_choose
from schemas import ContactSubmissionCreate, HeroPage

TEMPLATES_DIR = Path(__file__).resolve().parent.parent / "templates"
templates = Jinja2Templates(directory=str(TEMPLATES_DIR))

router = APIRouter(include_in_schema=False)

CONTACT_FIELDS = ("first_name", "last_name", "email", "phone", "company_name", "company_website", "message")


def render(request: Request, db: Database, name: str, context: Dict[str, Any], status_code: int = 200):
    """Render a public page; every page carries the footer settings."""
    context = dict(context, footer=serialize(load_footer(db)))
    return templates.TemplateResponse(request, name, context, status_code=status_code)


@router.get("/")
def home_page(request: Request, db: Database = Depends(get_db)):
    with handle_errors("Failed to render home page"):
        return render(request, db, "home.html", {
            "hero": serialize(latest_hero(db, HeroPage.home)),
            "industries": serialize_all(get_documents(db, "industrycard")),
            "testimonials": serialize_all(get_documents(db, "testimonial")),
            "trusted": serialize_all(get_documents(db, "trustedcompany")),
            "why_choose": serialize(load_why_choose(db)),
            "posts": serialize_all(get_documents(db, "blogpost", {"published": True}, limit=3)),
        })


@router.get("/about")
def about_page(request: Request, db: Database = Depends(get_db)):
    with handle_errors("Failed to render about page"):
        return render(request, db, "about.html", {
            "hero": serialize(latest_hero(db, HeroPage.about)),
            "about": serialize(load_about(db)),
            "why_choose": serialize(load_why_choose(db)),
            "teams": serialize_all(get_documents(db, "teamcategory", newest_first=False)),
            "testimonials": serialize_all(get_documents(db, "testimonial")),
        })


@router.get("/blogs")
def blogs_page(request: Request, db: Database = Depends(get_db)):
    with handle_errors("Failed to render blogs"):
        return render(request, db, "blogs.html", {
            "hero": serialize(latest_hero(db, HeroPage.blog)),
            "posts": serialize_all(get_documents(db, "blogpost", {"published": True})),
        })


@router.get("/blogs/{slug}")
def blog_detail_page(slug: str, request: Request, db: Database = Depends(get_db)):
    with handle_errors("Failed to render blog post"):
        post = db["blogpost"].find_one({"slug": slug, "published": True})
        if post is None:
            raise HTTPException(status_code=404, detail="Blog post not found")
        return render(request, db, "blog_detail.html", {"post": serialize(post)})


@router.get("/case-studies")
def case_studies_page(request: Request, db: Database = Depends(get_db)):
    with handle_errors("Failed to render case studies"):
        return render(request, db, "case_studies.html", {
            "case_studies": serialize_all(get_documents(db, "casestudy")),
        })


@router.get("/case-studies/{slug}")
def case_study_detail_page(slug: str, request: Request, db: Database = Depends(get_db)):
    with handle_errors("Failed to render case study"):
        case_study = find_case_study(db, slug)
        if case_study is None:
            raise HTTPException(status_code=404, detail="Case study not found")
        return render(request, db, "case_study_detail.html", {"case_study": serialize(case_study)})


@router.get("/services")
def services_page(request: Request, db: Database = Depends(get_db)):
    with handle_errors("Failed to render services"):
        return render(request, db, "services.html", {"groups": services_by_category(db)})


@router.get("/services/{slug}")
def service_detail_page(slug: str, request: Request, db: Database = Depends(get_db)):
    with handle_errors("Failed to render service"):
        service = db["service"].find_one({"slug": slug})
        if service is None:
            raise HTTPException(status_code=404, detail="Service not found")
        return render(request, db, "service_detail.html", {"service": serialize(service)})


@router.get("/hire")
def hire_page(request: Request, db: Database = Depends(get_db)):
    with handle_errors("Failed to render hire listings"):
        return render(request, db, "hire.html", {
            "listings": serialize_all(get_documents(db, "hirelisting", {"published": True})),
        })


@router.get("/contact")
def contact_page(request: Request, db: Database = Depends(get_db)):
    return render(request, db, "contact.html", {"values": {}, "errors": [], "submitted": False})


@router.post("/contact")
async def contact_submit(request: Request, db: Database = Depends(get_db)):
    form = await request.form()
    values = {name: str(form.get(name, "")).strip() for name in CONTACT_FIELDS}
    try:
        item = ContactSubmissionCreate(**values)
    except ValidationError as exc:
        errors = sorted({".".join(str(p) for p in err["loc"]) for err in exc.errors()})
        return render(request, db, "contact.html", {"values": values, "errors": errors, "submitted": False},
                      status_code=400)
    with handle_errors("Failed to submit contact form"):
        submit_contact(item, db)
    return render(request, db, "contact.html", {"values": {}, "errors": [], "submitted": True}, status_code=201)
