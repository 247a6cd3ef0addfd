"""
Result Assembler

Runs every field extractor and the price subsystem over one fetched
document and builds the canonical ExtractionResult.
"""
from typing import Optional

from lp_analyzer.extractors import fields
from lp_analyzer.extractors.document import Document
from lp_analyzer.extractors.prices import extract_prices
from lp_analyzer.models.record import ExtractionResult
from lp_analyzer.utils.logger import LayerLogger


class ResultAssembler:
    """Document in, ExtractionResult out. Never raises on bad markup."""

    def __init__(self):
        self.logger = LayerLogger("assembler")

    def assemble(self, url: str, html: str, fetch_strategy: Optional[str] = None) -> ExtractionResult:
        doc = Document.parse(url, html)

        title = fields.extract_title(doc)
        product_name = fields.extract_product_name(doc, title)
        description = fields.extract_description(doc)
        structured_data = fields.extract_structured_data(doc)
        og_title, og_description, og_image = fields.extract_open_graph(doc)
        features = fields.extract_features(doc)

        category = fields.extract_category(doc, structured_data)
        if not category:
            category = fields.infer_category(product_name, title, description, *features)
            if category:
                self.logger.log_decision(
                    decision=f"category={category}",
                    reason="keyword_inference",
                    url=url,
                )

        prices, price_display = extract_prices(doc.html, doc.text)

        result = ExtractionResult(
            url=url,
            title=title,
            product_name=product_name,
            description=description,
            category=category,
            features=features,
            effects=fields.extract_effects(doc),
            ingredients=fields.extract_ingredients(doc),
            company=fields.extract_company(doc),
            campaign=fields.extract_campaign(doc),
            guarantee=fields.extract_guarantee(doc),
            authority=fields.extract_authority(doc),
            testimonial_count=fields.count_testimonials(doc),
            images=fields.extract_images(doc),
            structured_data=structured_data,
            og_title=og_title,
            og_description=og_description,
            og_image=og_image,
            prices=prices,
            price=price_display,
            fetch_strategy=fetch_strategy,
        )

        self.logger.log_extraction_summary(
            url=url,
            fields_present=result.get_present_fields(),
            fields_missing=result.get_missing_fields(),
            score=result.completeness_score(),
            fetch_strategy=fetch_strategy,
            price_candidates=len(prices.all),
        )
        return result
