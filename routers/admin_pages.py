"""
Admin pages

Each admin screen is a list plus a form. Form posts are handed to the same
handler functions that serve the JSON API, then the browser is redirected
back to the list (post/redirect/get). Access is enforced by
``security.AdminAuthMiddleware`` for everything under ``/admin``.
"""
import inspect
import json
import logging
from dataclasses import dataclass
from functools import partial
from typing import Any, Callable, Dict, List, Optional, Sequence
from urllib.parse import urlencode

from fastapi import APIRouter, Depends, HTTPException, Request
from fastapi.responses import RedirectResponse
from pydantic import BaseModel, ValidationError
from pymongo.database import Database
from starlette.datastructures import UploadFile

from database import get_db, get_document, get_documents, serialize_all
from routers import (
    about,
    blogs,
    case_studies,
    contact,
    content,
    footer,
    heroes,
    hire,
    industries,
    services,
    team,
    testimonials,
    trusted,
    why_choose,
)
from routers.auth import authenticate
from routers.pages import templates
from schemas import (
    AboutPage,
    BlogPostCreate,
    CaseStudyCreate,
    ContactStatus,
    ContactStatusUpdate,
    ContentBlockCreate,
    FooterSettings,
    HeroPage,
    HireListingCreate,
    IndustryCardCreate,
    ServiceCategoryCreate,
    ServiceCreate,
    TestimonialCreate,
    TrustedCompanyCreate,
    WhyChooseUs,
)
from security import clear_admin_cookie, issue_admin_session
from uploads import UploadStore, get_upload_store

logger = logging.getLogger(__name__)

router = APIRouter(include_in_schema=False)


@dataclass
class FormField:
    name: str
    label: str
    kind: str = "text"  # text | textarea | image | tags | lines | json | checkbox | select
    options: Sequence[str] = ()
    required: bool = False


@dataclass
class AdminResource:
    label: str
    collection: str
    columns: List[str]
    fields: List[FormField]
    create: Callable[..., Any]
    delete: Callable[..., Any]
    newest_first: bool = True
    store_uploads: bool = True


def _call_with_schema(handler: Callable[..., Any], schema: type):
    def create(values: Dict[str, Any], db: Database, uploads: UploadStore):
        return handler(schema(**values), db=db, uploads=uploads)
    return create


async def _create_team_category(values: Dict[str, Any], db: Database, uploads: UploadStore):
    return await team.create_team_category(
        tab_name=values.get("tab_name", ""), cards=json.dumps(values.get("cards") or []),
        images=[], image_indexes=[], db=db, uploads=uploads,
    )


async def _create_hero(values: Dict[str, Any], db: Database, uploads: UploadStore):
    try:
        page = HeroPage(values.get("page") or "home")
    except ValueError:
        raise HTTPException(status_code=400, detail="Unknown page")
    return await heroes.create_hero(
        page=page, title=values.get("title", ""), description=values.get("description", ""),
        button_text=values.get("button_text", ""), image=values.get("image_file"), db=db, uploads=uploads,
    )


def _delete_hero(doc_id: str, db: Database, uploads: UploadStore):
    doc = get_document(db, heroes.COLLECTION, doc_id, heroes.NOT_FOUND)
    return heroes.delete_hero(HeroPage(doc["page"]), doc_id, db=db, uploads=uploads)


def _create_service(values: Dict[str, Any], db: Database, uploads: UploadStore):
    category = db[services.CATEGORY_COLLECTION].find_one({"name": values.get("category", "")})
    if category is None:
        raise HTTPException(status_code=400, detail="Unknown category")
    item = ServiceCreate(
        category_id=str(category["_id"]),
        hero_section={
            "title": values.get("title", ""),
            "description": values.get("description", ""),
            "image": values.get("image", ""),
        },
        card_sections=values.get("card_sections") or [],
        content=values.get("content", ""),
    )
    return services.create_service(item, db=db, uploads=uploads)


RESOURCES: Dict[str, AdminResource] = {
    "blogs": AdminResource(
        label="Blog posts",
        collection=blogs.COLLECTION,
        columns=["title", "slug", "published"],
        fields=[
            FormField("title", "Title", required=True),
            FormField("image", "Cover image", "image", required=True),
            FormField("description", "Description", "textarea", required=True),
            FormField("excerpt", "Excerpt", "textarea"),
            FormField("content", "Content (HTML)", "textarea"),
            FormField("author", "Author"),
            FormField("tags", "Tags (comma separated)", "tags"),
            FormField("published", "Published", "checkbox"),
        ],
        create=_call_with_schema(blogs.create_blog_post, BlogPostCreate),
        delete=lambda doc_id, db, uploads: blogs.delete_blog_post(doc_id, db=db),
    ),
    "case-studies": AdminResource(
        label="Case studies",
        collection=case_studies.COLLECTION,
        columns=["title", "slug", "header_title"],
        fields=[
            FormField("title", "Title", required=True),
            FormField("header_title", "Header title", required=True),
            FormField("header_description", "Header description", "textarea", required=True),
            FormField("content", "Content (HTML)", "textarea", required=True),
            FormField("cards", 'Cards (JSON: [{"title", "description", "image"}])', "json"),
        ],
        create=_call_with_schema(case_studies.create_case_study, CaseStudyCreate),
        delete=lambda doc_id, db, uploads: case_studies.delete_case_study(doc_id, db=db),
    ),
    "industries": AdminResource(
        label="Industries",
        collection=industries.COLLECTION,
        columns=["title", "tags"],
        fields=[
            FormField("title", "Title", required=True),
            FormField("description", "Description", "textarea", required=True),
            FormField("image", "Image", "image", required=True),
            FormField("tags", "Tags (comma separated)", "tags"),
        ],
        create=_call_with_schema(industries.create_industry, IndustryCardCreate),
        delete=lambda doc_id, db, uploads: industries.delete_industry(doc_id, db=db),
    ),
    "team": AdminResource(
        label="Team categories",
        collection=team.COLLECTION,
        columns=["tab_name"],
        fields=[
            FormField("tab_name", "Tab name", required=True),
            FormField("cards", 'Cards (JSON: [{"title", "description", "image", "tags", "button_text"}])', "json"),
        ],
        create=_create_team_category,
        delete=lambda doc_id, db, uploads: team.delete_team_category(doc_id, db=db),
        newest_first=False,
    ),
    "testimonials": AdminResource(
        label="Testimonials",
        collection=testimonials.COLLECTION,
        columns=["name", "title"],
        fields=[
            FormField("name", "Name", required=True),
            FormField("title", "Title / role"),
            FormField("quote", "Quote", "textarea", required=True),
            FormField("image", "Photo", "image"),
        ],
        create=_call_with_schema(testimonials.create_testimonial, TestimonialCreate),
        delete=lambda doc_id, db, uploads: testimonials.delete_testimonial(doc_id, db=db, uploads=uploads),
    ),
    "trusted-companies": AdminResource(
        label="Trusted companies",
        collection=trusted.COLLECTION,
        columns=["name", "image"],
        fields=[
            FormField("name", "Name", required=True),
            FormField("image", "Logo", "image", required=True),
        ],
        create=_call_with_schema(trusted.create_trusted_company, TrustedCompanyCreate),
        delete=lambda doc_id, db, uploads: trusted.delete_trusted_company(doc_id, db=db, uploads=uploads),
    ),
    "heroes": AdminResource(
        label="Hero sections",
        collection=heroes.COLLECTION,
        columns=["page", "title", "button_text"],
        fields=[
            FormField("page", "Page", "select", options=[p.value for p in HeroPage], required=True),
            FormField("title", "Title", required=True),
            FormField("description", "Description", "textarea", required=True),
            FormField("button_text", "Button text"),
            FormField("image", "Background image", "image"),
        ],
        create=_create_hero,
        delete=_delete_hero,
        store_uploads=False,
    ),
    "services": AdminResource(
        label="Services",
        collection=services.COLLECTION,
        columns=["slug", "category_id"],
        fields=[
            FormField("category", "Category name", required=True),
            FormField("title", "Hero title", required=True),
            FormField("description", "Hero description", "textarea", required=True),
            FormField("image", "Hero image", "image"),
            FormField(
                "card_sections",
                'Card sections (JSON: [{"section_title", "section_description", "cards": [{"title", "description"}]}])',
                "json",
            ),
            FormField("content", "Content (HTML)", "textarea"),
        ],
        create=_create_service,
        delete=lambda doc_id, db, uploads: services.delete_service(doc_id, db=db, uploads=uploads),
    ),
    "service-categories": AdminResource(
        label="Service categories",
        collection=services.CATEGORY_COLLECTION,
        columns=["name", "description"],
        fields=[
            FormField("name", "Name", required=True),
            FormField("description", "Description", "textarea", required=True),
        ],
        create=lambda values, db, uploads: services.create_category(ServiceCategoryCreate(**values), db=db),
        delete=lambda doc_id, db, uploads: services.delete_category(doc_id, db=db),
        newest_first=False,
    ),
    "hire": AdminResource(
        label="Hire listings",
        collection=hire.COLLECTION,
        columns=["title", "author", "published"],
        fields=[
            FormField("title", "Title", required=True),
            FormField("description", "Description", "textarea", required=True),
            FormField("author", "Author", required=True),
            FormField("image", "Image", "image"),
            FormField("published", "Published", "checkbox"),
        ],
        create=_call_with_schema(hire.create_hire_listing, HireListingCreate),
        delete=lambda doc_id, db, uploads: hire.delete_hire_listing(doc_id, db=db, uploads=uploads),
    ),
    "content": AdminResource(
        label="Content blocks",
        collection=content.COLLECTION,
        columns=["title"],
        fields=[
            FormField("title", "Title", required=True),
            FormField("description", "Description", "textarea", required=True),
            FormField("image", "Image", "image", required=True),
        ],
        create=_call_with_schema(content.create_content_block, ContentBlockCreate),
        delete=lambda doc_id, db, uploads: content.delete_content_block(doc_id, db=db),
    ),
}

templates.env.globals["admin_nav"] = [(key, res.label) for key, res in RESOURCES.items()]

FOOTER_FIELDS = [
    FormField("logo_url", "Logo URL"),
    FormField("tagline", "Tagline"),
    FormField("associate_partner", "Associate partner"),
    FormField("contact_email", "Contact email"),
    FormField("company_links", 'Company links (JSON: [{"label", "href"}])', "json"),
    FormField("certifications", 'Certifications (JSON: [{"label", "image"}])', "json"),
    FormField("contact_phones", 'Phones (JSON: [{"label", "number"}])', "json"),
    FormField("offices", 'Offices (JSON: [{"title", "lines": []}])', "json"),
    FormField("contact_notes", "Contact notes (one per line)", "lines"),
    FormField("international_note", "International note", "textarea"),
    FormField("copyright_text", "Copyright text"),
]

WHY_CHOOSE_FIELDS = [
    FormField("title", "Title"),
    FormField("intro", "Intro paragraphs (one per line)", "lines"),
    FormField("benefits", 'Benefits (JSON: [{"title", "description", "image"}])', "json"),
    FormField("mission", "Mission", "textarea"),
    FormField("vision", "Vision", "textarea"),
    FormField("core_values", "Core values (one per line)", "lines"),
]

ABOUT_FIELDS = [
    FormField("title", "Title", required=True),
    FormField("description", "Description", "textarea", required=True),
    FormField("company_history", "Company history", "textarea", required=True),
    FormField("mission", "Mission", "textarea", required=True),
    FormField("vision", "Vision", "textarea", required=True),
    FormField("team", 'Team (JSON: [{"name", "position", "bio", "image"}])', "json"),
    FormField("values", 'Values (JSON: [{"title", "description"}])', "json"),
]


class FormError(Exception):
    pass


async def read_form(request: Request, fields: List[FormField], uploads: UploadStore,
                    store_uploads: bool = True, stored: Optional[List[str]] = None) -> Dict[str, Any]:
    """Convert a submitted admin form into plain values for a schema or handler.

    An uploaded file wins over the typed URL of an image field. With
    ``store_uploads`` off the raw upload is passed on as ``<name>_file``.
    Paths of files written here are appended to ``stored`` so the caller can
    discard them if the submission is rejected.
    """
    form = await request.form()
    values: Dict[str, Any] = {}
    for f in fields:
        raw = form.get(f.name)
        if f.kind == "checkbox":
            values[f.name] = raw is not None
        elif f.kind == "image":
            upload = form.get(f"{f.name}_file")
            if isinstance(upload, UploadFile) and upload.filename and store_uploads:
                values[f.name] = await uploads.save(upload)
                if stored is not None:
                    stored.append(values[f.name])
            elif isinstance(upload, UploadFile) and upload.filename:
                values[f"{f.name}_file"] = upload
                values[f.name] = ""
            else:
                values[f.name] = str(raw or "").strip()
        elif f.kind == "tags":
            values[f.name] = [t.strip() for t in str(raw or "").split(",") if t.strip()]
        elif f.kind == "lines":
            values[f.name] = [line.strip() for line in str(raw or "").splitlines() if line.strip()]
        elif f.kind == "json":
            text = str(raw or "").strip()
            try:
                values[f.name] = json.loads(text) if text else []
            except json.JSONDecodeError:
                raise FormError(f"{f.label}: invalid JSON")
        else:
            values[f.name] = str(raw or "").strip()
    return values


def form_values(doc: Optional[Dict[str, Any]], fields: List[FormField]) -> Dict[str, Any]:
    """Render stored values back into form text."""
    doc = doc or {}
    out = {}
    for f in fields:
        value = doc.get(f.name)
        if f.kind == "json":
            out[f.name] = json.dumps(value or [], indent=2)
        elif f.kind == "lines":
            out[f.name] = "\n".join(value or [])
        elif f.kind == "tags":
            out[f.name] = ", ".join(value or [])
        else:
            out[f.name] = value if value is not None else ""
    return out


def describe_errors(exc: ValidationError) -> List[str]:
    return sorted({".".join(str(p) for p in err["loc"]) or "form" for err in exc.errors()})


def discard_uploads(uploads: UploadStore, stored: List[str], values: Dict[str, Any]) -> None:
    """Remove files written for a rejected form and blank the fields that pointed at them."""
    for path in stored:
        uploads.remove(path)
        for name, value in values.items():
            if value == path:
                values[name] = ""


async def maybe_await(result):
    if inspect.isawaitable(result):
        return await result
    return result


def safe_next(target: Optional[str]) -> str:
    if target and target.startswith("/") and not target.startswith("//"):
        return target
    return "/admin"


# ---------------------- Login ----------------------
@router.get("/login")
def login_page(request: Request, next: str = "/admin"):
    return templates.TemplateResponse(request, "admin/login.html", {"next": safe_next(next), "error": None})


@router.post("/login")
async def login_submit(request: Request, db: Database = Depends(get_db)):
    form = await request.form()
    target = safe_next(str(form.get("next") or ""))
    admin = authenticate(db, str(form.get("username") or ""), str(form.get("password") or ""))
    if admin is None:
        return templates.TemplateResponse(
            request, "admin/login.html", {"next": target, "error": "Invalid username or password"}, status_code=401
        )
    response = RedirectResponse(url=target, status_code=303)
    issue_admin_session(response, admin, request.app.state.settings)
    logger.info("Admin %s logged in", admin["username"])
    return response


@router.post("/logout")
def logout_submit(request: Request):
    response = RedirectResponse(url="/login", status_code=303)
    clear_admin_cookie(response, request.app.state.settings)
    return response


# ---------------------- Dashboard ----------------------
@router.get("/admin")
def dashboard(request: Request, db: Database = Depends(get_db)):
    counts = {key: db[res.collection].count_documents({}) for key, res in RESOURCES.items()}
    new_contacts = db[contact.COLLECTION].count_documents({"status": ContactStatus.new.value})
    return templates.TemplateResponse(request, "admin/dashboard.html", {
        "resources": RESOURCES, "counts": counts, "new_contacts": new_contacts,
    })


# ---------------------- Contact submissions ----------------------
@router.get("/admin/contact")
def contact_admin(request: Request, db: Database = Depends(get_db)):
    return templates.TemplateResponse(request, "admin/contacts.html", {
        "submissions": serialize_all(get_documents(db, contact.COLLECTION)),
        "statuses": [s.value for s in ContactStatus],
    })


@router.post("/admin/contact/{contact_id}/status")
async def contact_status_submit(contact_id: str, request: Request, db: Database = Depends(get_db)):
    form = await request.form()
    try:
        item = ContactStatusUpdate(status=str(form.get("status") or ""))
    except ValidationError:
        raise HTTPException(status_code=400, detail="Invalid status")
    contact.update_contact_status(contact_id, item, db=db)
    return RedirectResponse(url="/admin/contact", status_code=303)


@router.post("/admin/contact/{contact_id}/delete")
def contact_delete_submit(contact_id: str, db: Database = Depends(get_db)):
    contact.delete_contact_submission(contact_id, db=db)
    return RedirectResponse(url="/admin/contact", status_code=303)


# ---------------------- Singletons ----------------------
def _singleton_page(request: Request, title: str, action: str, fields: List[FormField], values: Dict[str, Any],
                    error: Optional[str] = None, status_code: int = 200):
    return templates.TemplateResponse(request, "admin/singleton.html", {
        "title": title, "action": action, "fields": fields, "values": values, "error": error,
    }, status_code=status_code)


@router.get("/admin/footer")
def footer_admin(request: Request, db: Database = Depends(get_db)):
    return _singleton_page(request, "Footer settings", "/admin/footer", FOOTER_FIELDS,
                           form_values(footer.load_footer(db), FOOTER_FIELDS))


@router.post("/admin/footer")
async def footer_submit(request: Request, db: Database = Depends(get_db),
                        uploads: UploadStore = Depends(get_upload_store)):
    return await _save_singleton(request, db, uploads, "Footer settings", "/admin/footer", FOOTER_FIELDS,
                                 FooterSettings, footer.save_footer)


@router.get("/admin/why-choose")
def why_choose_admin(request: Request, db: Database = Depends(get_db)):
    return _singleton_page(request, "Why choose us", "/admin/why-choose", WHY_CHOOSE_FIELDS,
                           form_values(why_choose.load_why_choose(db) or WhyChooseUs().model_dump(), WHY_CHOOSE_FIELDS))


@router.post("/admin/why-choose")
async def why_choose_submit(request: Request, db: Database = Depends(get_db),
                            uploads: UploadStore = Depends(get_upload_store)):
    return await _save_singleton(request, db, uploads, "Why choose us", "/admin/why-choose", WHY_CHOOSE_FIELDS,
                                 WhyChooseUs, why_choose.save_why_choose)


@router.get("/admin/about")
def about_admin(request: Request, db: Database = Depends(get_db)):
    return _singleton_page(request, "About us", "/admin/about", ABOUT_FIELDS,
                           form_values(about.load_about(db), ABOUT_FIELDS))


@router.post("/admin/about")
async def about_submit(request: Request, db: Database = Depends(get_db),
                       uploads: UploadStore = Depends(get_upload_store)):
    return await _save_singleton(request, db, uploads, "About us", "/admin/about", ABOUT_FIELDS,
                                 AboutPage, partial(about.save_about, uploads=uploads))


async def _save_singleton(request: Request, db: Database, uploads: UploadStore, title: str, action: str,
                          fields: List[FormField], schema: type, handler: Callable[..., Any]):
    form = await request.form()
    submitted = {f.name: str(form.get(f.name) or "") for f in fields}
    try:
        values = await read_form(request, fields, uploads)
        item: BaseModel = schema(**values)
    except FormError as exc:
        return _singleton_page(request, title, action, fields, submitted, error=str(exc), status_code=400)
    except ValidationError as exc:
        return _singleton_page(request, title, action, fields, submitted,
                               error="Missing or invalid fields: " + ", ".join(describe_errors(exc)), status_code=400)
    handler(item, db=db)
    return RedirectResponse(url=action, status_code=303)


# ---------------------- Collections ----------------------
def _resource(key: str) -> AdminResource:
    resource = RESOURCES.get(key)
    if resource is None:
        raise HTTPException(status_code=404, detail="Not found")
    return resource


def _resource_page(request: Request, db: Database, key: str, error: Optional[str] = None,
                   values: Optional[Dict[str, Any]] = None, status_code: int = 200):
    resource = _resource(key)
    docs = serialize_all(get_documents(db, resource.collection, newest_first=resource.newest_first))
    return templates.TemplateResponse(request, "admin/resource.html", {
        "key": key, "resource": resource, "items": docs, "error": error,
        "values": values if values is not None else form_values({"published": True}, resource.fields),
    }, status_code=status_code)


@router.get("/admin/{key}")
def resource_admin(key: str, request: Request, db: Database = Depends(get_db)):
    return _resource_page(request, db, key)


@router.post("/admin/{key}")
async def resource_create_submit(key: str, request: Request, db: Database = Depends(get_db),
                                 uploads: UploadStore = Depends(get_upload_store)):
    resource = _resource(key)
    values: Dict[str, Any] = {}
    stored: List[str] = []
    try:
        values = await read_form(request, resource.fields, uploads, resource.store_uploads, stored)
        await maybe_await(resource.create(values, db, uploads))
    except FormError as exc:
        discard_uploads(uploads, stored, values)
        return _resource_page(request, db, key, error=str(exc), status_code=400)
    except ValidationError as exc:
        discard_uploads(uploads, stored, values)
        return _resource_page(request, db, key, error="Missing or invalid fields: " + ", ".join(describe_errors(exc)),
                              values=form_values(values, resource.fields), status_code=400)
    except HTTPException as exc:
        discard_uploads(uploads, stored, values)
        if exc.status_code >= 500:
            raise
        return _resource_page(request, db, key, error=str(exc.detail),
                              values=form_values(values, resource.fields), status_code=exc.status_code)
    logger.info("Admin created %s entry", key)
    return RedirectResponse(url=f"/admin/{key}", status_code=303)


@router.post("/admin/{key}/{doc_id}/delete")
def resource_delete_submit(key: str, doc_id: str, request: Request, db: Database = Depends(get_db),
                           uploads: UploadStore = Depends(get_upload_store)):
    resource = _resource(key)
    try:
        resource.delete(doc_id, db, uploads)
    except HTTPException as exc:
        if exc.status_code >= 500:
            raise
        return _resource_page(request, db, key, error=str(exc.detail), status_code=exc.status_code)
    logger.info("Admin deleted %s %s", key, doc_id)
    return RedirectResponse(url=f"/admin/{key}?{urlencode({'deleted': doc_id})}", status_code=303)
