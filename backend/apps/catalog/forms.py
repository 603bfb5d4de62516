from django import forms
from django.utils.translation import gettext_lazy as _

from .models import Category, Product


class ProductForm(forms.Form):
    """Product create/edit form.

    ``form_name`` is the origin reported for errors that are not attached to a
    visible field.
    """

    form_name = "product"

    product_id = forms.IntegerField(required=False, widget=forms.HiddenInput)
    name = forms.CharField(label=_("Name"), max_length=255)
    reference = forms.CharField(label=_("Reference"), max_length=64, required=False)
    price = forms.DecimalField(
        label=_("Retail price (tax excl.)"),
        max_digits=20,
        decimal_places=6,
        min_value=0,
        required=False,
        initial=0,
    )
    product_type = forms.ChoiceField(
        label=_("Type"), choices=Product.TYPE_CHOICES, initial=Product.TYPE_STANDARD
    )
    categories = forms.ModelMultipleChoiceField(
        label=_("Categories"), queryset=Category.objects.all(), required=False
    )
    active = forms.BooleanField(label=_("Online"), required=False)

    def __init__(self, *args, product_id=None, **kwargs):
        super().__init__(*args, **kwargs)
        self.expected_product_id = product_id
        if product_id is not None:
            self.fields["product_id"].initial = product_id

    def clean(self):
        cleaned = super().clean()
        submitted_id = cleaned.get("product_id")
        if submitted_id is not None and submitted_id != self.expected_product_id:
            raise forms.ValidationError(
                _("The submitted product does not match the product being edited."),
                code="product_mismatch",
            )
        return cleaned

    def category_ids(self):
        return tuple(c.id for c in self.cleaned_data.get("categories") or ())


class ProductCategoriesForm(forms.Form):
    """Category filter shown above the product grid."""

    id_category = forms.ModelChoiceField(
        label=_("Filter by categories"),
        queryset=Category.objects.order_by("name"),
        required=False,
    )


class CategoryTreeSelectorForm(forms.Form):
    categories = forms.ModelMultipleChoiceField(
        queryset=Category.objects.order_by("name"),
        required=False,
        widget=forms.CheckboxSelectMultiple,
    )
