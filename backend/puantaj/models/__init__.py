from .auth import User, SessionToken
from .customers import Customer, CustomerTask, CustomerQuote, CustomerQuoteItem, CustomerPayment
from .ledger import Transaction
from .contractors import Contractor, ContractorPayment
from .personnel import Personnel, Timesheet, PersonnelPayment
from .projects import Project
from .notes import Note

__all__ = [
    'User', 'SessionToken',
    'Customer', 'CustomerTask', 'CustomerQuote', 'CustomerQuoteItem', 'CustomerPayment',
    'Transaction',
    'Contractor', 'ContractorPayment',
    'Personnel', 'Timesheet', 'PersonnelPayment',
    'Project',
    'Note',
]
