# catalog_dashboard/services/pdf_service.py
"""
Product flyer and full catalog PDFs, drawn with reportlab on A4 pages.

Positions are expressed in millimetres from the top-left corner of the page
(like the printed layout) and converted to reportlab's bottom-left origin
when drawing.
"""
import io
import logging
import os
from dataclasses import dataclass
from datetime import date

import requests
from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfgen import canvas

from services.models import DEFAULT_CATEGORY, format_rupiah

logger = logging.getLogger(__name__)

PAGE_WIDTH_MM = A4[0] / mm
PAGE_HEIGHT_MM = A4[1] / mm
MARGIN = 15

# catalog layout (mm)
CONTENT_TOP = 45
CATEGORY_BLOCK = 15
CATEGORY_RESERVE = 20
PRODUCT_BLOCK = 45
CATEGORY_GAP = 5
IMAGE_SIZE = 35

BRAND_BLUE = colors.Color(30 / 255, 58 / 255, 138 / 255)
TEXT_DARK = colors.Color(31 / 255, 41 / 255, 55 / 255)
TEXT_GREY = colors.Color(107 / 255, 114 / 255, 128 / 255)
LIGHT_GREY = colors.Color(243 / 255, 244 / 255, 246 / 255)
FRAME_GREY = colors.Color(229 / 255, 231 / 255, 235 / 255)
FOOTER_GREY = colors.Color(156 / 255, 163 / 255, 175 / 255)

DEFAULT_BRANDING = {
    "name": "AUTOGEAR ACCESSORIES",
    "tagline": "Car & truck accessories catalog",
    "footer": "Sumber Jaya - Digital Accessories Catalog",
}


@dataclass
class LayoutBlock:
    kind: str  # "category" or "product"
    y: float  # mm from the top of the page
    category: str
    product: object = None


def fetch_image(url):
    """Returns an ImageReader for a URL or local path, or None if it cannot be loaded."""
    if not url:
        return None
    try:
        if url.startswith(("http://", "https://")):
            response = requests.get(url, timeout=10)
            response.raise_for_status()
            return ImageReader(io.BytesIO(response.content))
        if os.path.exists(url):
            return ImageReader(url)
        logger.warning(f"Image path does not exist: {url}")
    except Exception as e:
        logger.warning(f"Could not load image {url} for PDF: {e}")
    return None


def group_by_category(products, categories):
    """
    [(category name, [products])] in category-list order. Products whose
    category is not in the list follow, grouped under their own name.
    """
    groups = {}
    for category in categories:
        groups.setdefault(category.name, [])
    for product in products:
        groups.setdefault(product.category or DEFAULT_CATEGORY, []).append(product)
    return [(name, items) for name, items in groups.items() if items]


def layout_catalog(products, categories, page_height=PAGE_HEIGHT_MM):
    """
    Plans the catalog pages. A category header moves to a new page when it
    would leave no room below it; a product block moves to a new page when
    it does not fit above the footer.
    """
    pages = [[]]
    current_y = CONTENT_TOP

    for category_name, items in group_by_category(products, categories):
        if current_y + CATEGORY_RESERVE > page_height - 20:
            pages.append([])
            current_y = CONTENT_TOP
        pages[-1].append(LayoutBlock("category", current_y, category_name))
        current_y += CATEGORY_BLOCK

        for product in items:
            if current_y + PRODUCT_BLOCK > page_height - 15:
                pages.append([])
                current_y = CONTENT_TOP
            pages[-1].append(LayoutBlock("product", current_y, category_name, product))
            current_y += PRODUCT_BLOCK

        current_y += CATEGORY_GAP

    return pages


class _Page:
    """Small wrapper so drawing code can use top-left millimetre coordinates."""

    def __init__(self, pdf):
        self.pdf = pdf

    def y(self, top_mm):
        return A4[1] - top_mm * mm

    def text(self, x_mm, top_mm, text, font="Helvetica", size=10, color=TEXT_DARK, align="left"):
        self.pdf.setFont(font, size)
        self.pdf.setFillColor(color)
        if align == "center":
            self.pdf.drawCentredString(x_mm * mm, self.y(top_mm), text)
        elif align == "right":
            self.pdf.drawRightString(x_mm * mm, self.y(top_mm), text)
        else:
            self.pdf.drawString(x_mm * mm, self.y(top_mm), text)

    def rect(self, x_mm, top_mm, w_mm, h_mm, fill=None, stroke=None):
        if fill is not None:
            self.pdf.setFillColor(fill)
        if stroke is not None:
            self.pdf.setStrokeColor(stroke)
        self.pdf.rect(x_mm * mm, self.y(top_mm + h_mm), w_mm * mm, h_mm * mm,
                      fill=1 if fill is not None else 0, stroke=1 if stroke is not None else 0)

    def image(self, reader, x_mm, top_mm, w_mm, h_mm):
        try:
            self.pdf.drawImage(reader, x_mm * mm, self.y(top_mm + h_mm), w_mm * mm, h_mm * mm,
                               preserveAspectRatio=True, anchor="c", mask="auto")
        except Exception as e:
            logger.warning(f"Failed to add image to PDF: {e}")

    def wrap(self, text, width_mm, font="Helvetica", size=10):
        return simpleSplit(text or "", font, size, width_mm * mm)


def _render(draw, title) -> bytes:
    buffer = io.BytesIO()
    pdf = canvas.Canvas(buffer, pagesize=A4)
    pdf.setTitle(title)
    draw(pdf)
    pdf.save()
    return buffer.getvalue()


def generate_product_flyer(product, branding=None, image_loader=fetch_image) -> bytes:
    branding = {**DEFAULT_BRANDING, **(branding or {})}

    def draw(pdf):
        page = _Page(pdf)
        page.rect(0, 0, PAGE_WIDTH_MM, 5, fill=BRAND_BLUE)
        page.text(MARGIN, 15, branding["name"], font="Helvetica-Bold", size=10, color=BRAND_BLUE)

        reader = image_loader(product.image_url)
        if reader is not None:
            page.image(reader, MARGIN, 25, 180, 120)
        else:
            page.rect(MARGIN, 25, 180, 120, stroke=FRAME_GREY)

        y = 160
        for line in page.wrap(product.name, 180, "Helvetica-Bold", 24)[:2]:
            page.text(MARGIN, y, line, font="Helvetica-Bold", size=24)
            y += 10
        page.text(MARGIN, y, f"Category: {product.category} | SKU: {product.code}", size=12, color=TEXT_GREY)

        y += 15
        page.text(MARGIN, y, f"Price: {format_rupiah(product.price)}", font="Helvetica-Bold", size=20,
                  color=BRAND_BLUE)

        y += 15
        page.text(MARGIN, y, "Product description:", font="Helvetica-Bold", size=12)
        y += 8
        for line in page.wrap(product.description or "No description.", 180):
            if y > 275:
                break
            page.text(MARGIN, y, line, size=10)
            y += 5

        page.text(PAGE_WIDTH_MM / 2, 285, f"© {branding['footer']}", size=8, color=FOOTER_GREY, align="center")

    logger.info(f"Generating flyer PDF for {product.code}.")
    return _render(draw, f"{branding['name']} - {product.name}")


def _draw_catalog_header(page, branding, printed_on):
    page.rect(0, 0, PAGE_WIDTH_MM, 35, fill=BRAND_BLUE)
    page.text(MARGIN, 18, f"{branding['name']} FULL CATALOG", font="Helvetica-Bold", size=20, color=colors.white)
    page.text(MARGIN, 26, branding["tagline"], size=9, color=colors.white)
    page.text(PAGE_WIDTH_MM - MARGIN, 26, f"Printed: {printed_on:%d/%m/%Y}", size=9, color=colors.white,
              align="right")


def _draw_product_block(page, product, top, image_loader):
    page.rect(MARGIN, top, IMAGE_SIZE, IMAGE_SIZE, stroke=FRAME_GREY)
    reader = image_loader(product.image_url)
    if reader is not None:
        page.image(reader, MARGIN + 1, top + 1, IMAGE_SIZE - 2, IMAGE_SIZE - 2)

    text_x = MARGIN + IMAGE_SIZE + 8
    text_width = PAGE_WIDTH_MM - text_x - MARGIN
    name = page.wrap(product.name, text_width, "Helvetica-Bold", 12)
    page.text(text_x, top + 5, name[0] if name else "", font="Helvetica-Bold", size=12)
    page.text(text_x, top + 10, f"Code: {product.code}", size=9, color=TEXT_GREY)
    page.text(text_x, top + 18, format_rupiah(product.price), font="Helvetica-Bold", size=11, color=BRAND_BLUE)

    # at most three description lines per block
    lines = page.wrap(product.description or "No description.", text_width, size=8)[:3]
    for i, line in enumerate(lines):
        page.text(text_x, top + 25 + i * 4, line, size=8, color=TEXT_GREY)

    page.pdf.setStrokeColor(LIGHT_GREY)
    divider = page.y(top + PRODUCT_BLOCK - 5)
    page.pdf.line(MARGIN * mm, divider, (PAGE_WIDTH_MM - MARGIN) * mm, divider)


def generate_catalog_pdf(products, categories, branding=None, image_loader=fetch_image, printed_on=None) -> bytes:
    branding = {**DEFAULT_BRANDING, **(branding or {})}
    printed_on = printed_on or date.today()
    pages = layout_catalog(products, categories)
    cache = {}

    def cached_loader(url):
        if url not in cache:
            cache[url] = image_loader(url)
        return cache[url]

    def draw(pdf):
        page = _Page(pdf)
        total = len(pages)
        for number, blocks in enumerate(pages, start=1):
            _draw_catalog_header(page, branding, printed_on)
            for block in blocks:
                if block.kind == "category":
                    page.rect(MARGIN, block.y, PAGE_WIDTH_MM - MARGIN * 2, 10, fill=LIGHT_GREY)
                    page.text(MARGIN + 5, block.y + 7, block.category.upper(), font="Helvetica-Bold", size=14,
                              color=BRAND_BLUE)
                else:
                    _draw_product_block(page, block.product, block.y, cached_loader)
            page.text(PAGE_WIDTH_MM / 2, PAGE_HEIGHT_MM - 10, f"Page {number} of {total}", size=8,
                      color=FOOTER_GREY, align="center")
            pdf.showPage()

    logger.info(f"Generating catalog PDF: {len(products)} products on {len(pages)} page(s).")
    return _render(draw, f"{branding['name']} Full Catalog")
