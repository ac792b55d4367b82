from service_scan import service


@service
class DeepService:
    pass
