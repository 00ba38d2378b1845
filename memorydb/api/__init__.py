# Package initialization for api module
