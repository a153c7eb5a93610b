from app.pos.models.company import CompanyModel, StoreModel  # noqa: F401
