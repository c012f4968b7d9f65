"""Populate user objects from spreadsheet rows."""

from excel_template.beans.bean_handler import BeanCellCallbackHandler
from excel_template.beans.bean_setter import AttributeBeanSetter, BeanSetter

__all__ = ["AttributeBeanSetter", "BeanCellCallbackHandler", "BeanSetter"]
