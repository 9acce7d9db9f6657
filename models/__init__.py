from models.application import LoanApplication
from models.collateral import Collateral, LoanCollateral
from models.customer import Customer
from models.loan import Loan
from models.loan_product import LoanProduct
from models.partner import ApiPartner
from models.user import User

__all__ = [
    "ApiPartner",
    "Collateral",
    "Customer",
    "Loan",
    "LoanApplication",
    "LoanCollateral",
    "LoanProduct",
    "User",
]
