"""
Catalog entity definitions.

Each definition tells CatalogLifecycle which table an entity lives in, which
fields are required, which fields must stay unique (case-insensitively), and
which multipart fields carry images (and the column each one lands in).
"""
from dataclasses import dataclass, field
from typing import Dict, Optional, Tuple


@dataclass(frozen=True)
class FieldSpec:
    """A writable column of a catalog entity."""
    name: str
    required: bool = False       # required on create
    required_on_update: bool = False
    numeric: bool = False
    unique: bool = False         # case-insensitive business key
    label: Optional[str] = None  # name used in error messages

    @property
    def display(self) -> str:
        return self.label or self.name


@dataclass(frozen=True)
class EntityDefinition:
    """
    Everything CatalogLifecycle needs to know about one entity type.

    image_slots maps the multipart field name to the column holding its URL.
    When images_required is set, every slot must be uploaded on create
    (all-or-nothing). partial_update entities only touch the fields supplied.
    """
    name: str
    label: str
    table: str
    folder: str
    fields: Tuple[FieldSpec, ...]
    image_slots: Dict[str, str] = field(default_factory=dict)
    images_required: bool = True
    partial_update: bool = False
    duplicate_status: int = 400

    @property
    def unique_fields(self) -> Tuple[FieldSpec, ...]:
        return tuple(f for f in self.fields if f.unique)

    def get_field(self, name: str) -> Optional[FieldSpec]:
        for f in self.fields:
            if f.name == name:
                return f
        return None


PRODUCT = EntityDefinition(
    name="product",
    label="Product",
    table="products",
    folder="BrandStore/Products",
    fields=(
        FieldSpec("name", required=True, required_on_update=True, unique=True, label="Product name"),
    ),
    image_slots={"image": "image_url"},
)

PRODUCT_CATEGORY = EntityDefinition(
    name="product_category",
    label="Category",
    table="product_categories",
    folder="BrandStore/ProductCategories",
    fields=(
        FieldSpec("name", required=True, required_on_update=True, label="Product name"),
        FieldSpec("category", required=True, required_on_update=True, unique=True, label="Product category"),
    ),
    image_slots={"image": "image_url"},
)

SUBCATEGORY = EntityDefinition(
    name="subcategory",
    label="Sub Category",
    table="subcategories",
    folder="BrandStore/SubCategories",
    fields=(
        FieldSpec("category", required=True, label="Product category"),
        FieldSpec("name", required=True, label="Sub category name"),
        FieldSpec("price", required=True, numeric=True, label="Price"),
        FieldSpec("sku", required=True, unique=True, label="SKU"),
        FieldSpec("material"),
        FieldSpec("brand"),
        FieldSpec("description"),
        FieldSpec("gender"),
    ),
    image_slots={
        "image_1": "image_1",
        "image_2": "image_2",
        "image_3": "image_3",
        "image_4": "image_4",
    },
    partial_update=True,
)

BANNER = EntityDefinition(
    name="banner",
    label="Banner",
    table="banners",
    folder="BrandStoreBanner",
    fields=(
        FieldSpec("title", required=True, required_on_update=True, label="Banner title"),
        FieldSpec("project", required=True, required_on_update=True, label="Project"),
        FieldSpec("platform", required=True, required_on_update=True, label="Platform"),
    ),
    image_slots={"image": "image_url"},
)

CUSTOMER = EntityDefinition(
    name="customer",
    label="Customer",
    table="customers",
    folder="BrandStore/CustomerProfiles",
    fields=(
        FieldSpec("full_name", required=True, label="Full name"),
        FieldSpec("email", required=True, unique=True, label="Email"),
        FieldSpec("phone", required=True, unique=True, label="Phone number"),
        FieldSpec("password_hash", required=True, label="Password"),
    ),
    image_slots={"profile": "profile_url"},
    images_required=False,
    partial_update=True,
    duplicate_status=409,
)

CATALOG_ENTITIES = {
    entity.name: entity
    for entity in (PRODUCT, PRODUCT_CATEGORY, SUBCATEGORY, BANNER, CUSTOMER)
}

# Folder for rich-text editor uploads (subcategory descriptions)
EDITOR_FOLDER = "BrandStore/Editor"
