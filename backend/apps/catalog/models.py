from django.db import models

from apps.shops.models import Language, Shop


class Category(models.Model):
    name = models.CharField(max_length=128)

    def __str__(self):
        return self.name


class Product(models.Model):
    TYPE_STANDARD = "standard"
    TYPE_VIRTUAL = "virtual"
    TYPE_CHOICES = [
        (TYPE_STANDARD, "Standard product"),
        (TYPE_VIRTUAL, "Virtual product"),
    ]

    name = models.CharField(max_length=255)
    reference = models.CharField(max_length=64, blank=True, default="")
    price = models.DecimalField(max_digits=20, decimal_places=6, default=0)
    image = models.CharField(max_length=255, blank=True, default="")
    active = models.BooleanField(default=False)
    product_type = models.CharField(
        max_length=16, choices=TYPE_CHOICES, default=TYPE_STANDARD
    )
    categories = models.ManyToManyField(
        Category, related_name="products", through="ProductCategory"
    )
    shops = models.ManyToManyField(
        Shop, related_name="products", through="ProductShop"
    )
    date_add = models.DateTimeField(auto_now_add=True)
    date_upd = models.DateTimeField(auto_now=True)

    def __str__(self):
        return self.name

    class Meta:
        indexes = [
            models.Index(fields=["name"], name="product_name_idx"),
            models.Index(fields=["reference"], name="product_reference_idx"),
        ]


class ProductCategory(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE)
    category = models.ForeignKey(Category, on_delete=models.CASCADE)
    position = models.PositiveIntegerField(default=0)

    class Meta:
        unique_together = ("product", "category")
        db_table = "product_categories"
        ordering = ["position"]


class ProductShop(models.Model):
    product = models.ForeignKey(Product, on_delete=models.CASCADE)
    shop = models.ForeignKey(Shop, on_delete=models.CASCADE)

    class Meta:
        unique_together = ("product", "shop")
        db_table = "product_shops"


class CategoryTranslation(models.Model):
    category = models.ForeignKey(
        Category, related_name="translations", on_delete=models.CASCADE
    )
    language = models.ForeignKey(Language, on_delete=models.CASCADE)
    name = models.CharField(max_length=128)

    class Meta:
        unique_together = ("category", "language")

    def __str__(self):
        return f"{self.category_id}:{self.language_id}"


class ProductTranslation(models.Model):
    product = models.ForeignKey(
        Product, related_name="translations", on_delete=models.CASCADE
    )
    language = models.ForeignKey(Language, on_delete=models.CASCADE)
    name = models.CharField(max_length=255)

    class Meta:
        unique_together = ("product", "language")

    def __str__(self):
        return f"{self.product_id}:{self.language_id}"


class ProductDownload(models.Model):
    """File attached to a virtual product."""

    product = models.ForeignKey(
        Product, related_name="downloads", on_delete=models.CASCADE
    )
    # Name of the file inside DOWNLOAD_DIR
    filename = models.CharField(max_length=255)
    # Name proposed to the browser
    display_filename = models.CharField(max_length=255)

    def __str__(self):
        return self.display_filename
