"""
Signature module.

Maps fields placed on rendered PDF pages into PDF coordinates, draws their
content (signature images, text, checkboxes, dates) onto the pages and
optionally appends one certificate of signature page per signer.
"""
