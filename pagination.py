PAGE_SIZE = 10


class Paginator:
    def __init__(self, total_rows: int, page_size: int = PAGE_SIZE, page_index: int = 0):
        self.page_size = page_size
        self.page_index = int(page_index)
        self.total_rows = max(0, total_rows)
        self._clamp()

    def _clamp(self):
        max_page = self.page_count - 1
        self.page_index = max(0, min(self.page_index, max_page))

    def set_page(self, page_index: int):
        self.page_index = int(page_index)
        self._clamp()

    def next_page(self):
        if self.page_end < self.total_rows:
            self.page_index += 1
            self._clamp()

    def prev_page(self):
        if self.page_index > 0:
            self.page_index -= 1
            self._clamp()

    @property
    def page_start(self) -> int:
        return self.page_index * self.page_size

    @property
    def page_end(self) -> int:
        return min(self.total_rows, self.page_start + self.page_size)

    @property
    def page_count(self) -> int:
        # an empty result is still "page 1 of 1"
        if self.total_rows == 0:
            return 1
        return (self.total_rows - 1) // self.page_size + 1
