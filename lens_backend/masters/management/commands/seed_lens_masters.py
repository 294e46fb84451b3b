from decimal import Decimal

from django.core.management.base import BaseCommand
from django.db import transaction

from masters.models import (
    Customer,
    LensBrand,
    LensCategory,
    LensCoating,
    LensDia,
    LensFitting,
    LensPrice,
    LensProduct,
    LensTinting,
    LensType,
    PriceMapping,
)


class Command(BaseCommand):
    help = "Seed lens masters, prices and demo customers (idempotent)"

    @transaction.atomic
    def handle(self, *args, **options):
        self.stdout.write(self.style.WARNING("Seeding lens masters..."))

        # -------------------------------
        # ATTRIBUTE LOOKUPS
        # -------------------------------
        categories = {}
        for name, short in [
            ("Single Vision", "SV"),
            ("Bifocal", "BF"),
            ("Progressive", "PRG"),
            ("Reading", "RD"),
        ]:
            categories[short], _ = LensCategory.objects.get_or_create(
                name=name, defaults={"short_name": short}
            )

        brands = {}
        for name, short in [("Essilor", "ESS"), ("Zeiss", "ZIS"), ("Hoya", "HOY")]:
            brands[short], _ = LensBrand.objects.get_or_create(
                name=name, defaults={"short_name": short}
            )

        types = {}
        for name, short in [("Spherical", "SPH"), ("Aspheric", "ASP")]:
            types[short], _ = LensType.objects.get_or_create(
                name=name, defaults={"short_name": short}
            )

        for name in ["65", "70", "75"]:
            LensDia.objects.get_or_create(name=name, defaults={"short_name": f"{name}mm"})

        coatings = {}
        for name, short in [
            ("Anti-Reflective (AR)", "AR"),
            ("Blue Light Protection", "BLP"),
            ("Scratch Resistant", "SR"),
        ]:
            coatings[short], _ = LensCoating.objects.get_or_create(
                name=name, defaults={"short_name": short}
            )

        for name, short, price in [
            ("Standard Fitting", "STD", "200"),
            ("Premium Fitting", "PRM", "350"),
            ("Rimless Fitting", "RML", "600"),
        ]:
            LensFitting.objects.get_or_create(
                name=name,
                defaults={"short_name": short, "fitting_price": Decimal(price)},
            )

        for name, short, price in [
            ("None", "NONE", "0"),
            ("Grey Tint", "GRY", "150"),
            ("Photochromic", "PHO", "900"),
        ]:
            LensTinting.objects.get_or_create(
                name=name,
                defaults={"short_name": short, "tinting_price": Decimal(price)},
            )

        # -------------------------------
        # LENSES + PRICES (per coating)
        # -------------------------------
        lenses_data = [
            ("ESS-SV-150", "Essilor SV 1.50", "ESS", "SV", "SPH", {"AR": 1200, "BLP": 1800}),
            ("ZIS-PRG-160", "Zeiss Progressive 1.60", "ZIS", "PRG", "ASP", {"AR": 5200, "SR": 4800}),
            ("HOY-BF-156", "Hoya Bifocal 1.56", "HOY", "BF", "SPH", {"AR": 2600}),
        ]

        price_rows = []
        for code, name, brand, cat, lens_type, prices in lenses_data:
            lens, _ = LensProduct.objects.get_or_create(
                product_code=code,
                defaults={
                    "name": name,
                    "brand": brands[brand],
                    "category": categories[cat],
                    "lens_type": types[lens_type],
                },
            )
            for coating_short, price in prices.items():
                row, _ = LensPrice.objects.get_or_create(
                    lens=lens,
                    coating=coatings[coating_short],
                    defaults={"price": Decimal(price)},
                )
                price_rows.append(row)

        # -------------------------------
        # CUSTOMERS (+ one discount mapping)
        # -------------------------------
        vision, _ = Customer.objects.get_or_create(
            code="CUST-001",
            defaults={
                "name": "Vision Opticals",
                "shop_name": "Vision Opticals MG Road",
                "credit_limit": Decimal("50000"),
                "outstanding_credit": Decimal("0"),
            },
        )
        Customer.objects.get_or_create(
            code="CUST-002",
            defaults={
                "name": "Clear Sight Eyewear",
                "shop_name": "Clear Sight",
                "credit_limit": Decimal("20000"),
                "outstanding_credit": Decimal("24500"),
            },
        )

        if price_rows:
            PriceMapping.objects.get_or_create(
                customer=vision,
                lens_price=price_rows[0],
                defaults={"discount_rate": Decimal("10")},
            )

        self.stdout.write(self.style.SUCCESS("✅ Lens masters seeded successfully."))
