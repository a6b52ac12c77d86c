"""
Database Schemas

MongoDB collection schemas as Pydantic models. Each ``*Create`` model is the
validated shape of a new document; the collection name is the lowercase of the
resource name by convention:

- BlogPost -> "blogpost"
- CaseStudy -> "casestudy"
- IndustryCard -> "industrycard"
- TeamCategory -> "teamcategory"
- Testimonial -> "testimonial"
- TrustedCompany -> "trustedcompany"
- FooterSettings -> "footersettings"
- WhyChooseUs -> "whychooseus"
- HeroSection -> "herosection"
- ContentBlock -> "contentblock"
- ContactSubmission -> "contactsubmission"
- ServiceCategory -> "servicecategory"
- Service -> "service"
- HireListing -> "hirelisting"
- AboutPage -> "aboutpage"
- Admin -> "admin"

``*Update`` models have every field optional; handlers persist only the
fields the client actually sent.
"""
from datetime import datetime
from enum import Enum
from typing import List, Optional

from pydantic import BaseModel, EmailStr, Field


# Blog posts
class BlogPostCreate(BaseModel):
    title: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1, description="Public path or URL of the cover image")
    description: str = Field(..., min_length=1)
    content: Optional[str] = Field(None, description="Rich text (HTML)")
    excerpt: Optional[str] = None
    author: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    published: bool = True


class BlogPostUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = None
    excerpt: Optional[str] = None
    author: Optional[str] = None
    tags: Optional[List[str]] = None
    published: Optional[bool] = None


# Case studies
class CaseStudyCard(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)


class CaseStudyCreate(BaseModel):
    title: str = Field(..., min_length=1)
    content: str = Field(..., min_length=1, description="Rich text body")
    header_title: str = Field(..., min_length=1)
    header_description: str = Field(..., min_length=1)
    cards: List[CaseStudyCard] = Field(default_factory=list)


class CaseStudyUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    content: Optional[str] = Field(None, min_length=1)
    header_title: Optional[str] = None
    header_description: Optional[str] = None
    cards: Optional[List[CaseStudyCard]] = None


class CardImageReplace(BaseModel):
    image_url: str = Field(..., min_length=1)


# Industries
class IndustryCardCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)


class IndustryCardUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = Field(None, min_length=1)
    tags: Optional[List[str]] = None


# Team
class TeamCard(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)
    tags: List[str] = Field(default_factory=list)
    button_text: str = "Hire Now"


class TeamCategoryCreate(BaseModel):
    tab_name: str = Field(..., min_length=1)
    cards: List[TeamCard] = Field(default_factory=list)


# Testimonials
class TestimonialCreate(BaseModel):
    name: str = Field(..., min_length=1)
    title: Optional[str] = None
    quote: str = Field(..., min_length=1)
    image: Optional[str] = Field(None, description="URL, /uploads/ path or data: URL")


class TestimonialUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    title: Optional[str] = None
    quote: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = None


# Trusted companies
class TrustedCompanyCreate(BaseModel):
    name: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)


class TrustedCompanyUpdate(BaseModel):
    name: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = Field(None, min_length=1)


# Footer (singleton)
class FooterLink(BaseModel):
    label: str
    href: str


class Certification(BaseModel):
    label: str
    image: str = ""


class ContactPhone(BaseModel):
    label: str
    number: str


class Office(BaseModel):
    title: str
    lines: List[str] = Field(default_factory=list)


class FooterSettings(BaseModel):
    logo_url: str = ""
    tagline: str = ""
    associate_partner: str = ""
    company_links: List[FooterLink] = Field(default_factory=list)
    certifications: List[Certification] = Field(default_factory=list)
    contact_email: str = ""
    contact_phones: List[ContactPhone] = Field(default_factory=list)
    offices: List[Office] = Field(default_factory=list)
    contact_notes: List[str] = Field(default_factory=list)
    international_note: str = ""
    copyright_text: str = ""


# Why choose us (singleton)
class Benefit(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    image: str = ""


class WhyChooseUs(BaseModel):
    title: str = "Why Choose Us?"
    intro: List[str] = Field(default_factory=list)
    benefits: List[Benefit] = Field(default_factory=list)
    mission: str = ""
    vision: str = ""
    core_values: List[str] = Field(default_factory=list)


# Hero sections
class HeroPage(str, Enum):
    home = "home"
    blog = "blog"
    about = "about"


# Content blocks
class ContentBlockCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    image: str = Field(..., min_length=1)


class ContentBlockUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = Field(None, min_length=1)


# Services
class ServiceCategoryCreate(BaseModel):
    name: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class ServiceCard(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class ServiceCardSection(BaseModel):
    section_title: str = Field(..., min_length=1)
    section_description: str = ""
    cards: List[ServiceCard] = Field(default_factory=list)


class ServiceHero(BaseModel):
    title: str = Field(..., min_length=1, description="Also the source of the service slug")
    description: str = Field(..., min_length=1)
    image: str = Field("", description="URL, /uploads/ path or data: URL")


class ServiceCreate(BaseModel):
    category_id: str = Field(..., min_length=1)
    hero_section: ServiceHero
    card_sections: List[ServiceCardSection] = Field(default_factory=list)
    content: str = Field("", description="Rich text (HTML)")


class ServiceUpdate(BaseModel):
    category_id: Optional[str] = Field(None, min_length=1)
    hero_section: Optional[ServiceHero] = None
    card_sections: Optional[List[ServiceCardSection]] = None
    content: Optional[str] = None


# Hire listings
class HireListingCreate(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    author: str = Field(..., min_length=1)
    image: str = ""
    published: bool = True


class HireListingUpdate(BaseModel):
    title: Optional[str] = Field(None, min_length=1)
    description: Optional[str] = Field(None, min_length=1)
    author: Optional[str] = Field(None, min_length=1)
    image: Optional[str] = None
    published: Optional[bool] = None


# About page (singleton)
class AboutMember(BaseModel):
    name: str = Field(..., min_length=1)
    position: str = Field(..., min_length=1)
    bio: str = Field(..., min_length=1)
    image: str = ""


class AboutValue(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)


class AboutPage(BaseModel):
    title: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1)
    mission: str = Field(..., min_length=1)
    vision: str = Field(..., min_length=1)
    company_history: str = Field(..., min_length=1)
    team: List[AboutMember] = Field(default_factory=list)
    values: List[AboutValue] = Field(default_factory=list)


# Contact submissions
class ContactStatus(str, Enum):
    new = "new"
    contacted = "contacted"
    resolved = "resolved"


class ContactSubmissionCreate(BaseModel):
    first_name: str = Field(..., min_length=1)
    last_name: str = Field(..., min_length=1)
    email: EmailStr
    phone: str = Field(..., min_length=1)
    company_name: str = ""
    company_website: str = ""
    message: str = Field(..., min_length=1)


class ContactStatusUpdate(BaseModel):
    status: ContactStatus


# Admin / auth
class Admin(BaseModel):
    username: str = Field(..., description="Admin username (unique)")
    email: str = ""
    password: str = Field(..., description="pbkdf2_sha256 hash of the password")
    reset_token: Optional[str] = None
    reset_expires: Optional[datetime] = None


class LoginRequest(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)


class AdminCreate(BaseModel):
    username: str = Field(..., min_length=1)
    password: str = Field(..., min_length=1)
    email: str = Field(..., min_length=1)


class AdminSettingsUpdate(BaseModel):
    username: Optional[str] = Field(None, min_length=1)
    email: Optional[str] = None
    current_password: Optional[str] = None
    new_password: Optional[str] = None


class ForgotPasswordRequest(BaseModel):
    username: str = Field(..., min_length=1)


class ResetPasswordRequest(BaseModel):
    token: str = Field(..., min_length=1)
    new_password: str = Field(..., min_length=1)
