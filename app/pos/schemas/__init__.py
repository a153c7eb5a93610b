from app.pos.schemas.base import (  # noqa: F401
    Block,
    BlockKind,
    CatalogItem,
    CryptogramFields,
    FieldRequirementProfile,
    FieldState,
    Jurisdiction,
    Line,
    LineItem,
    LineItemKind,
    Merchant,
    ReceiptDocument,
    ResolvedFields,
    SettledLine,
    Settlement,
    StoreContext,
    SyntheticAuthorization,
    TaxConvention,
    TemplateKey,
    TenderType,
    UnitProfile,
)
from app.pos.schemas.api import (  # noqa: F401
    CompanyIn,
    CompanyOut,
    CompanyUpdate,
    FieldProfileOut,
    GenerateReceiptRequest,
    GenerateReceiptResponse,
    ItemIn,
    StoreDataIn,
    StoreOut,
)
