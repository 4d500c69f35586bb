"""
Extraction Result Data Classes.

This module defines the data structures returned by the capture engine:
line items and the final extracted record. Both are frozen; the engine
builds a record once per document and never touches it again.

Author: ML Engineering Team
"""

import json
from dataclasses import dataclass, field
from typing import Any, Dict, Tuple


@dataclass(frozen=True)
class LineItem:
    """
    One priced row of an invoice or remittance advice.

    Attributes:
        quantity: Units billed (1.0 for remittance rows).
        description: Free-text description of the goods or service.
        unit_price: Price per unit; 0.0 when unknown.
        amount: Extended amount for the row.
        date: ISO date of the row, or "".
        reference: Invoice/document number the row refers to, or "".
        unit: Unit of measure token as printed (EA, LBS...), or "".
        discount: Discount or deduction applied to the row.
    """
    quantity: float = 0.0
    description: str = ""
    unit_price: float = 0.0
    amount: float = 0.0
    date: str = ""
    reference: str = ""
    unit: str = ""
    discount: float = 0.0

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary format."""
        return {
            'quantity': self.quantity,
            'description': self.description,
            'unit_price': self.unit_price,
            'amount': self.amount,
            'date': self.date,
            'reference': self.reference,
            'unit': self.unit,
            'discount': self.discount,
        }

    def __repr__(self) -> str:
        return (
            f"LineItem(qty={self.quantity:g}, "
            f"desc='{self.description[:30]}', "
            f"price={self.unit_price:.2f}, "
            f"amount={self.amount:.2f})"
        )


@dataclass(frozen=True)
class ExtractedRecord:
    """
    Represents the structured result of capturing one document.

    Money fields are 0.0 when absent and date fields are "" when
    unknown, so callers never have to handle None.

    Attributes:
        counterparty_name: Issuing party (vendor) name
        document_id: Invoice, check or payment number
        document_date: Invoice/payment date (YYYY-MM-DD or "")
        due_date: Payment due date (YYYY-MM-DD or "")
        terms: Canonical payment terms ("NET 30", "C.O.D."...)
        description: Summary description
        line_items: Validated line items in document order
        total_amount: Explicit total, or the line-item sum
        notes: Free-text notes (PO numbers, remarks)
        template: Name of the template used for extraction
        acquisition_method: text-layer, ocr, flattened or raw
        source_file: Source filename
        total_derived: True when total_amount was summed from line items
        no_data_extracted: True when no header field and no item was found

    Example:
        >>> record = engine.extract_text("Invoice 9165009 ... Total $3,431.58")
        >>> record.document_id
        '9165009'
        >>> print(record.to_json())
    """
    counterparty_name: str = ""
    document_id: str = ""
    document_date: str = ""
    due_date: str = ""
    terms: str = ""
    description: str = ""
    line_items: Tuple[LineItem, ...] = ()
    total_amount: float = 0.0
    notes: Tuple[str, ...] = ()

    # Metadata
    template: str = "generic"
    acquisition_method: str = ""
    source_file: str = ""
    total_derived: bool = False
    no_data_extracted: bool = False

    HEADER_FIELDS = (
        'counterparty_name',
        'document_id',
        'document_date',
        'due_date',
        'terms',
        'description',
    )

    @property
    def fields(self) -> Dict[str, str]:
        """
        Get the header fields as a dictionary.

        Returns:
            Dictionary of field names to values.
        """
        return {name: getattr(self, name) for name in self.HEADER_FIELDS}

    @property
    def missing_fields(self) -> list:
        """
        Get list of header fields that were not extracted.

        Returns:
            List of missing field names.
        """
        return [name for name, value in self.fields.items() if not value]

    @property
    def line_item_total(self) -> float:
        """Sum of all line-item amounts."""
        return round(sum(item.amount for item in self.line_items), 2)

    def to_dict(self) -> Dict[str, Any]:
        """
        Convert to dictionary format.

        Returns:
            Dictionary representation of the record.
        """
        return {
            'counterparty_name': self.counterparty_name,
            'document_id': self.document_id,
            'document_date': self.document_date,
            'due_date': self.due_date,
            'terms': self.terms,
            'description': self.description,
            'line_items': [item.to_dict() for item in self.line_items],
            'total_amount': self.total_amount,
            'notes': list(self.notes),
            'template': self.template,
            'acquisition_method': self.acquisition_method,
            'source_file': self.source_file,
            'total_derived': self.total_derived,
            'no_data_extracted': self.no_data_extracted,
        }

    def to_json(self, indent: int = 2) -> str:
        """
        Convert to JSON string.

        Args:
            indent: JSON indentation level.

        Returns:
            JSON string representation.
        """
        return json.dumps(self.to_dict(), indent=indent)

    def to_flat_dict(self) -> Dict[str, Any]:
        """
        Convert to a flat dictionary suitable for a spreadsheet row.

        Returns:
            Flat dictionary with no nested structures.
        """
        return {
            'counterparty_name': self.counterparty_name,
            'document_id': self.document_id,
            'document_date': self.document_date,
            'due_date': self.due_date,
            'terms': self.terms,
            'total_amount': self.total_amount,
            'description': self.description,
            'line_item_count': len(self.line_items),
            'notes': '; '.join(self.notes),
            'template': self.template,
            'acquisition_method': self.acquisition_method,
            'source_file': self.source_file,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'ExtractedRecord':
        """
        Create an ExtractedRecord from a dictionary produced by to_dict().

        Args:
            data: Dictionary with record data.

        Returns:
            ExtractedRecord instance.
        """
        return cls(
            counterparty_name=data.get('counterparty_name', ''),
            document_id=data.get('document_id', ''),
            document_date=data.get('document_date', ''),
            due_date=data.get('due_date', ''),
            terms=data.get('terms', ''),
            description=data.get('description', ''),
            line_items=tuple(LineItem(**item) for item in data.get('line_items', [])),
            total_amount=data.get('total_amount', 0.0),
            notes=tuple(data.get('notes', [])),
            template=data.get('template', 'generic'),
            acquisition_method=data.get('acquisition_method', ''),
            source_file=data.get('source_file', ''),
            total_derived=data.get('total_derived', False),
            no_data_extracted=data.get('no_data_extracted', False),
        )

    def __repr__(self) -> str:
        return (
            f"ExtractedRecord("
            f"id={self.document_id or 'N/A'}, "
            f"counterparty={self.counterparty_name or 'N/A'}, "
            f"items={len(self.line_items)}, "
            f"total={self.total_amount:.2f})"
        )
