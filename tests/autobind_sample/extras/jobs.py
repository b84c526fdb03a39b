from autobind import transient

from autobind_sample.services import UnitOfWork


@transient()
class NightlyJob: ...


# re-exported: scanned with its defining module only
JobUnitOfWork = UnitOfWork
