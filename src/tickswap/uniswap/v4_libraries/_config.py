# Maximum number of results held by each memoized library function
V4_LIB_CACHE_SIZE = 1024
