"""Stock totals per subcategory."""
