from .config import PAGE_SIZE


class FirstPageOnly:
    """
    Fetch a single page of remote records per invocation.

    Tiny returns up to 100 records per page; only the first `page_size` are
    handed to the reconciliation loop. Walking further pages is left to a
    strategy that follows `numero_paginas`, so the loop never has to know.
    """

    def __init__(self, page_size: int = PAGE_SIZE):
        self.page_size = page_size

    def fetch(self, client, endpoint: str, list_key: str, item_key: str, **params) -> list[dict]:
        retorno = client.search(endpoint, pagina=1, **params)
        items = retorno.get(list_key) or []
        records = []
        for item in items[:self.page_size]:
            record = item.get(item_key) if isinstance(item, dict) else None
            if record is not None:
                records.append(record)
        return records
