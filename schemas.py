"""
Database Schemas

MongoDB collection schemas for the pesantren site, defined as Pydantic models.
Each collection model validates a full stored document; the *Create / *Update
models below each collection are the request bodies accepted by the admin and
public endpoints.

Collections:
- News             -> "news"
- BlogPost         -> "blog"
- Event            -> "event"
- GalleryItem      -> "gallery"
- Testimonial      -> "testimonial"
- Donation         -> "donation"
- DonationCampaign -> "donation_campaign"
- Contact          -> "contact"
- AdminUser        -> "admin_user"
"""

from datetime import datetime
from typing import List, Literal, Optional

from pydantic import BaseModel, EmailStr, Field, model_validator

Currency = Literal['IDR', 'USD', 'EUR']


class Seo(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    keywords: List[str] = Field(default_factory=list)


# ==========================
# NEWS
# ==========================
class NewsAuthor(BaseModel):
    name: str = Field("Admin", min_length=1)
    email: Optional[str] = None
    role: str = "Admin"


class News(BaseModel):
    """
    News articles
    Collection name: "news"
    """
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1)
    excerpt: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1, description="HTML content")
    image: Optional[str] = None
    video_url: Optional[str] = Field(None, pattern=r'^https://(www\.)?(youtube\.com/watch\?v=|youtu\.be/)')
    author: NewsAuthor = Field(default_factory=NewsAuthor)
    status: Literal['draft', 'published'] = 'draft'
    published_at: Optional[datetime] = None
    views: int = Field(0, ge=0)
    category: str = Field(..., min_length=1)
    priority: int = Field(1, ge=1, le=5)
    featured: bool = False
    tags: List[str] = Field(default_factory=list)


class NewsCreate(BaseModel):
    title: str
    excerpt: str
    content: str
    category: str
    image: Optional[str] = None
    video_url: Optional[str] = None
    author: Optional[NewsAuthor] = None
    status: Literal['draft', 'published'] = 'draft'
    priority: int = 1
    featured: bool = False
    tags: List[str] = Field(default_factory=list)


class NewsUpdate(BaseModel):
    title: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    category: Optional[str] = None
    image: Optional[str] = None
    video_url: Optional[str] = None
    author: Optional[NewsAuthor] = None
    status: Optional[Literal['draft', 'published']] = None
    priority: Optional[int] = None
    featured: Optional[bool] = None
    tags: Optional[List[str]] = None


# ==========================
# BLOG
# ==========================
BlogCategory = Literal['Religious', 'Education', 'Community', 'Events', 'News', 'Stories']


class BlogAuthor(BaseModel):
    name: str = Field("Admin", min_length=1)
    avatar: Optional[str] = None


class BlogPost(BaseModel):
    """
    Blog posts
    Collection name: "blog"
    """
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1)
    excerpt: str = Field(..., min_length=1, max_length=500)
    content: str = Field(..., min_length=1)
    featured_image: str = Field(..., min_length=1)
    author: BlogAuthor = Field(default_factory=BlogAuthor)
    category: BlogCategory
    tags: List[str] = Field(default_factory=list)
    status: Literal['draft', 'published', 'archived'] = 'draft'
    seo: Seo = Field(default_factory=Seo)
    read_time: int = 0
    views: int = Field(0, ge=0)
    published_at: Optional[datetime] = None


class BlogCreate(BaseModel):
    title: str
    excerpt: str
    content: str
    category: BlogCategory
    slug: Optional[str] = None
    featured_image: Optional[str] = None
    author: Optional[BlogAuthor] = None
    tags: List[str] = Field(default_factory=list)
    status: Literal['draft', 'published', 'archived'] = 'draft'
    seo: Optional[Seo] = None


class BlogUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    excerpt: Optional[str] = None
    content: Optional[str] = None
    category: Optional[BlogCategory] = None
    featured_image: Optional[str] = None
    author: Optional[BlogAuthor] = None
    tags: Optional[List[str]] = None
    status: Optional[Literal['draft', 'published', 'archived']] = None
    seo: Optional[Seo] = None


# ==========================
# EVENTS
# ==========================
EventCategory = Literal['Religious', 'Educational', 'Social', 'Sports', 'Cultural', 'Workshop']
EventStatus = Literal['draft', 'published', 'cancelled', 'completed']


class Organizer(BaseModel):
    name: str = Field("Admin", min_length=1)
    contact: Optional[str] = None


class Event(BaseModel):
    """
    School events
    Collection name: "event"
    """
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1, max_length=500)
    content: Optional[str] = None
    featured_image: str = Field(..., min_length=1)
    date: datetime
    time: str = Field(..., min_length=1)
    location: str = Field(..., min_length=1)
    capacity: Optional[int] = Field(None, ge=1)
    registered: int = Field(0, ge=0)
    registration_open: bool = True
    category: EventCategory
    tags: List[str] = Field(default_factory=list)
    status: EventStatus = 'draft'
    organizer: Organizer = Field(default_factory=Organizer)
    seo: Seo = Field(default_factory=Seo)
    price: float = Field(0, ge=0)
    currency: str = 'IDR'

    @model_validator(mode='after')
    def check_capacity(self):
        if self.capacity and self.registered > self.capacity:
            raise ValueError("Registered count cannot exceed capacity")
        return self


class EventCreate(BaseModel):
    title: str
    description: str
    featured_image: str
    date: datetime
    time: str
    location: str
    category: EventCategory
    slug: Optional[str] = None
    content: Optional[str] = None
    capacity: Optional[int] = None
    registration_open: bool = True
    tags: List[str] = Field(default_factory=list)
    status: EventStatus = 'draft'
    organizer: Optional[Organizer] = None
    seo: Optional[Seo] = None
    price: float = 0
    currency: str = 'IDR'


class EventUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    content: Optional[str] = None
    featured_image: Optional[str] = None
    date: Optional[datetime] = None
    time: Optional[str] = None
    location: Optional[str] = None
    capacity: Optional[int] = None
    registered: Optional[int] = None
    registration_open: Optional[bool] = None
    category: Optional[EventCategory] = None
    tags: Optional[List[str]] = None
    status: Optional[EventStatus] = None
    organizer: Optional[Organizer] = None
    seo: Optional[Seo] = None
    price: Optional[float] = None
    currency: Optional[str] = None


# ==========================
# GALLERY
# ==========================
GalleryCategory = Literal['Events', 'Daily Life', 'Ceremonies', 'Education', 'Sports', 'Religious', 'Videos']


class MediaContent(BaseModel):
    type: Literal['image', 'youtube']
    url: str
    caption: Optional[str] = None
    alt_text: Optional[str] = None
    youtube_id: Optional[str] = None


class AlbumItem(MediaContent):
    order: int = 0


class GalleryItem(BaseModel):
    """
    Gallery entries: a single image, a single YouTube video or an album
    Collection name: "gallery"
    """
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1)
    description: Optional[str] = Field(None, max_length=1000)
    type: Literal['image', 'video', 'album'] = 'image'
    cover_image: str = Field(..., min_length=1)
    content: Optional[MediaContent] = None
    items: List[AlbumItem] = Field(default_factory=list)
    category: GalleryCategory
    tags: List[str] = Field(default_factory=list)
    status: Literal['draft', 'published', 'archived'] = 'draft'
    featured: bool = False
    view_count: int = 0
    seo: Seo = Field(default_factory=Seo)


class GalleryItemInput(BaseModel):
    url: str
    type: Literal['image', 'youtube'] = 'image'
    caption: Optional[str] = None
    alt_text: Optional[str] = None
    order: Optional[int] = None


class GalleryCreate(BaseModel):
    title: str
    category: GalleryCategory
    type: Literal['image', 'video', 'album'] = 'image'
    cover_image: Optional[str] = None
    description: Optional[str] = None
    image_url: Optional[str] = None
    youtube_url: Optional[str] = None
    items: List[GalleryItemInput] = Field(default_factory=list)
    caption: Optional[str] = None
    alt_text: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    status: Literal['draft', 'published', 'archived'] = 'draft'
    featured: bool = False
    seo: Optional[Seo] = None


class GalleryUpdate(BaseModel):
    title: Optional[str] = None
    description: Optional[str] = None
    category: Optional[GalleryCategory] = None
    cover_image: Optional[str] = None
    image_url: Optional[str] = None
    youtube_url: Optional[str] = None
    items: Optional[List[GalleryItemInput]] = None
    caption: Optional[str] = None
    alt_text: Optional[str] = None
    tags: Optional[List[str]] = None
    status: Optional[Literal['draft', 'published', 'archived']] = None
    featured: Optional[bool] = None
    seo: Optional[Seo] = None


# ==========================
# TESTIMONIALS
# ==========================
TestimonialCategory = Literal['General', 'Academic', 'Spiritual', 'Facility', 'Service',
                              'Student', 'Parent', 'Alumni', 'Teacher', 'Community']
TestimonialStatus = Literal['pending', 'approved', 'rejected']


class Testimonial(BaseModel):
    """
    Testimonials from students, parents and visitors
    Collection name: "testimonial"
    """
    name: str = Field(..., min_length=1, max_length=100)
    role: Optional[str] = Field(None, max_length=100)
    content: str = Field(..., min_length=1, max_length=1000)
    rating: int = Field(5, ge=1, le=5)
    avatar: Optional[str] = None
    category: TestimonialCategory = 'General'
    status: TestimonialStatus = 'pending'
    featured: bool = False
    source: Literal['form', 'admin', 'import', 'public'] = 'form'
    email: Optional[str] = None
    phone: Optional[str] = None
    location: Optional[str] = Field(None, max_length=200)
    approved_by: Optional[str] = None
    approved_at: Optional[datetime] = None


class TestimonialSubmit(BaseModel):
    name: str
    content: str
    position: Optional[str] = None
    rating: int = 5
    avatar: Optional[str] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    location: Optional[str] = None
    category: TestimonialCategory = 'General'


class TestimonialCreate(BaseModel):
    name: str
    content: str
    role: Optional[str] = None
    rating: int = 5
    avatar: Optional[str] = None
    category: TestimonialCategory = 'General'
    status: TestimonialStatus = 'pending'
    featured: bool = False


class TestimonialUpdate(BaseModel):
    name: Optional[str] = None
    content: Optional[str] = None
    role: Optional[str] = None
    rating: Optional[int] = None
    avatar: Optional[str] = None
    category: Optional[TestimonialCategory] = None
    status: Optional[TestimonialStatus] = None
    featured: Optional[bool] = None
    email: Optional[EmailStr] = None
    phone: Optional[str] = None
    location: Optional[str] = None


# ==========================
# DONATIONS
# ==========================
PaymentMethod = Literal['bank_transfer', 'credit_card', 'e_wallet', 'cash', 'check']
PaymentStatus = Literal['pending', 'completed', 'failed', 'refunded']
CampaignStatus = Literal['draft', 'active', 'completed', 'cancelled']
CampaignCategory = Literal['Education', 'Infrastructure', 'Emergency', 'General', 'Events']


class Donation(BaseModel):
    """
    Donations received, optionally towards a campaign (by slug)
    Collection name: "donation"
    """
    donor_name: str = Field(..., min_length=1, max_length=100)
    donor_email: Optional[str] = None
    donor_phone: Optional[str] = None
    amount: float = Field(..., gt=0)
    currency: Currency = 'IDR'
    campaign: Optional[str] = None
    payment_method: PaymentMethod = 'bank_transfer'
    payment_status: PaymentStatus = 'pending'
    transaction_id: Optional[str] = None
    receipt_number: str = Field(..., min_length=1)
    is_anonymous: bool = False
    message: Optional[str] = Field(None, max_length=500)
    dedication: Optional[str] = Field(None, max_length=200)
    payment_date: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=1000)
    needs_reconciliation: bool = False


class DonationSubmit(BaseModel):
    donor_name: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    payment_method: PaymentMethod
    donor_email: Optional[EmailStr] = None
    donor_phone: Optional[str] = None
    currency: Currency = 'IDR'
    campaign: Optional[str] = None
    is_anonymous: bool = False
    message: Optional[str] = None
    dedication: Optional[str] = None


class DonationCreate(BaseModel):
    donor_name: str = Field(..., min_length=1)
    amount: float = Field(..., gt=0)
    donor_email: Optional[EmailStr] = None
    donor_phone: Optional[str] = None
    currency: Currency = 'IDR'
    campaign: Optional[str] = None
    payment_method: PaymentMethod = 'bank_transfer'
    payment_status: PaymentStatus = 'pending'
    is_anonymous: bool = False
    message: Optional[str] = None
    receipt_number: Optional[str] = None
    notes: Optional[str] = None


class DonationUpdate(BaseModel):
    donor_name: Optional[str] = None
    donor_email: Optional[EmailStr] = None
    donor_phone: Optional[str] = None
    amount: Optional[float] = None
    currency: Optional[Currency] = None
    campaign: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None
    payment_status: Optional[PaymentStatus] = None
    is_anonymous: Optional[bool] = None
    message: Optional[str] = None
    receipt_number: Optional[str] = None
    notes: Optional[str] = None


class DonationCampaign(BaseModel):
    """
    Donation drives, referenced from donations by slug
    Collection name: "donation_campaign"
    """
    title: str = Field(..., min_length=1, max_length=200)
    slug: str = Field(..., min_length=1)
    description: str = Field(..., min_length=1, max_length=2000)
    goal: float = Field(..., gt=0)
    collected: float = Field(0, ge=0)
    currency: Currency = 'IDR'
    start_date: datetime
    end_date: Optional[datetime] = None
    status: CampaignStatus = 'draft'
    featured: bool = False
    image: Optional[str] = None
    category: CampaignCategory
    progress: float = Field(0, ge=0, le=100)
    donor_count: int = Field(0, ge=0)


class CampaignCreate(BaseModel):
    title: str
    description: str
    goal: float
    start_date: datetime
    category: CampaignCategory
    currency: Currency = 'IDR'
    slug: Optional[str] = None
    collected: float = 0
    end_date: Optional[datetime] = None
    status: CampaignStatus = 'draft'
    featured: bool = False
    image: Optional[str] = None


class CampaignUpdate(BaseModel):
    title: Optional[str] = None
    slug: Optional[str] = None
    description: Optional[str] = None
    goal: Optional[float] = None
    collected: Optional[float] = None
    currency: Optional[Currency] = None
    start_date: Optional[datetime] = None
    end_date: Optional[datetime] = None
    status: Optional[CampaignStatus] = None
    featured: Optional[bool] = None
    image: Optional[str] = None
    category: Optional[CampaignCategory] = None


# ==========================
# CONTACT MESSAGES
# ==========================
ContactStatus = Literal['unread', 'read', 'replied', 'archived']
ContactPriority = Literal['low', 'medium', 'high']


class Contact(BaseModel):
    """
    Messages from the contact form
    Collection name: "contact"
    """
    name: str = Field(..., min_length=1, max_length=100)
    email: EmailStr
    subject: str = Field(..., min_length=1, max_length=200)
    message: str = Field(..., min_length=10, max_length=2000)
    status: ContactStatus = 'unread'
    priority: ContactPriority = 'medium'
    source: Literal['website', 'admin'] = 'website'
    ip_address: Optional[str] = None
    user_agent: Optional[str] = None
    responded_by: Optional[str] = None
    responded_at: Optional[datetime] = None
    notes: Optional[str] = Field(None, max_length=1000)


class ContactSubmit(BaseModel):
    name: str
    email: str
    subject: str
    message: str


class ContactCreate(BaseModel):
    name: str
    email: EmailStr
    subject: str
    message: str
    status: ContactStatus = 'unread'
    priority: ContactPriority = 'medium'
    notes: Optional[str] = None


class ContactUpdate(BaseModel):
    name: Optional[str] = None
    email: Optional[EmailStr] = None
    subject: Optional[str] = None
    message: Optional[str] = None
    status: Optional[ContactStatus] = None
    priority: Optional[ContactPriority] = None
    notes: Optional[str] = None


# ==========================
# ADMIN USERS
# ==========================
class AdminUser(BaseModel):
    """
    Back-office accounts
    Collection name: "admin_user"
    """
    email: EmailStr
    password_hash: str
    name: str = "Administrator"
    role: Literal['admin', 'editor', 'superadmin'] = 'admin'


class AdminLogin(BaseModel):
    email: EmailStr
    password: str
