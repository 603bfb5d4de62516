from django.contrib.auth.models import Group, Permission
from django.core.management.base import BaseCommand
from django.core.management.color import no_style
from django.db import connection, transaction

from apps.catalog.models import (
    Category,
    CategoryTranslation,
    Product,
    ProductCategory,
    ProductShop,
    ProductTranslation,
)
from apps.shops.models import Language, Shop

SHOPS = [
    (1, "Main shop"),
    (2, "Outlet"),
]

LANGUAGES = [
    (1, "English", "en", "en-US"),
    (2, "Français", "fr", "fr-FR"),
    (3, "Deutsch", "de", "de-DE"),
]

# name, {iso code: translated name}
CATEGORIES = [
    ("Clothes", {"fr": "Vêtements", "de": "Kleidung"}),
    ("Accessories", {"fr": "Accessoires", "de": "Zubehör"}),
    ("Art", {"fr": "Art", "de": "Kunst"}),
]

# id, name, reference, price, active, type, categories, shop ids, {iso code: name}
PRODUCTS = [
    (
        1,
        "Hummingbird printed t-shirt",
        "demo_1",
        "23.90",
        True,
        Product.TYPE_STANDARD,
        ["Clothes"],
        [1, 2],
        {"fr": "T-shirt imprimé colibri", "de": "Kolibri T-Shirt"},
    ),
    (
        2,
        "Hummingbird printed sweater",
        "demo_3",
        "35.90",
        True,
        Product.TYPE_STANDARD,
        ["Clothes"],
        [1],
        {"fr": "Pull imprimé colibri"},
    ),
    (
        3,
        "The best is yet to come framed poster",
        "demo_6",
        "29.00",
        True,
        Product.TYPE_STANDARD,
        ["Art"],
        [1, 2],
        {"fr": "Affiche encadrée The best is yet to come"},
    ),
    (
        4,
        "Mug the adventure begins",
        "demo_12",
        "11.90",
        False,
        Product.TYPE_STANDARD,
        ["Accessories"],
        [1],
        {},
    ),
    (
        5,
        "Mountain fox notebook",
        "demo_8",
        "12.90",
        True,
        Product.TYPE_STANDARD,
        ["Accessories"],
        [1],
        {"fr": "Carnet de notes renard"},
    ),
    (
        6,
        "Brown bear vector graphics",
        "demo_19",
        "9.00",
        True,
        Product.TYPE_VIRTUAL,
        ["Art"],
        [1, 2],
        {"fr": "Illustration vectorielle ours brun"},
    ),
]

CATALOG_MANAGERS_GROUP = "Catalog managers"
CATALOG_MANAGER_PERMISSIONS = ["view_product", "add_product", "change_product", "delete_product"]


class Command(BaseCommand):
    help = "Seed shops, languages and a demo catalog for the back office."

    def add_arguments(self, parser):
        parser.add_argument(
            "--flush", action="store_true", help="Delete existing catalog data before seeding"
        )

    @transaction.atomic
    def handle(self, *args, **options):
        def reset_sequences(models):
            sql_list = connection.ops.sequence_reset_sql(no_style(), models)
            if not sql_list:
                return
            with connection.cursor() as cursor:
                for sql in sql_list:
                    cursor.execute(sql)

        if options["flush"]:
            self.stdout.write("Flushing existing catalog data...")
            Product.objects.all().delete()
            Category.objects.all().delete()

        self.stdout.write("Seeding shops and languages...")
        for shop_id, name in SHOPS:
            Shop.objects.update_or_create(id=shop_id, defaults={"name": name, "active": True})
        languages = {}
        for language_id, name, iso_code, locale in LANGUAGES:
            language, _ = Language.objects.update_or_create(
                id=language_id,
                defaults={"name": name, "iso_code": iso_code, "locale": locale, "active": True},
            )
            languages[iso_code] = language

        self.stdout.write("Seeding categories...")
        name_to_cat = {}
        for name, translations in CATEGORIES:
            category, _ = Category.objects.get_or_create(name=name)
            name_to_cat[name] = category
            for iso_code, translated in translations.items():
                CategoryTranslation.objects.update_or_create(
                    category=category,
                    language=languages[iso_code],
                    defaults={"name": translated},
                )

        self.stdout.write("Seeding products...")
        positions = {}
        for (
            pid,
            name,
            reference,
            price,
            active,
            product_type,
            cat_names,
            shop_ids,
            translations,
        ) in PRODUCTS:
            product, _ = Product.objects.update_or_create(
                id=pid,
                defaults=dict(
                    name=name,
                    reference=reference,
                    price=price,
                    active=active,
                    product_type=product_type,
                ),
            )
            for cname in cat_names:
                position = positions.get(cname, 0)
                ProductCategory.objects.update_or_create(
                    product=product,
                    category=name_to_cat[cname],
                    defaults={"position": position},
                )
                positions[cname] = position + 1
            for shop_id in shop_ids:
                ProductShop.objects.get_or_create(product=product, shop_id=shop_id)
            for iso_code, translated in translations.items():
                ProductTranslation.objects.update_or_create(
                    product=product,
                    language=languages[iso_code],
                    defaults={"name": translated},
                )

        self.stdout.write("Granting catalog permissions...")
        group, _ = Group.objects.get_or_create(name=CATALOG_MANAGERS_GROUP)
        group.permissions.add(
            *Permission.objects.filter(
                content_type__app_label="catalog",
                codename__in=CATALOG_MANAGER_PERMISSIONS,
            )
        )

        # Explicit ids were inserted above; move the sequences past them.
        reset_sequences([Shop, Language, Product])

        self.stdout.write(self.style.SUCCESS("StoreAdmin seed completed."))
