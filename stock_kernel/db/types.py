"""
Module: stock_kernel.db.types
Responsibility: Column size limits shared by the stock models and the
    validation code that guards them.
Architecture position: Kernel > DB.  May be imported by models/, domain/,
    services/, and selectors/.  MUST NOT import from any of those layers.
"""

# Maximum length of a stock operation number (business identifier)
MAX_OPERATION_NUMBER_LENGTH = 255
