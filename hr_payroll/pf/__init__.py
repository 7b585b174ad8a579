"""PF register module — monthly Provident Fund entries and payment status."""
