import asyncio
import logging

import kubecall

MAX_CONFLICTS = 5


async def suspend_job(client: kubecall.Client, name: str) -> None:
    # The conflicts are not retried by the client: re-read and re-apply.
    for _ in range(MAX_CONFLICTS):
        job = await client.get_job(name)
        if job.get('spec', {}).get('suspend'):
            return
        job.setdefault('spec', {})['suspend'] = True
        try:
            await client.patch_job(name, job)
        except kubecall.APIConflictError:
            continue
        else:
            return
    raise RuntimeError(f"Job {name!r} keeps changing; gave up.")


async def main() -> None:
    kubecall.configure(verbose=True)
    logger = logging.getLogger('example')
    if kubecall.has_service_account():
        client = kubecall.Client.in_cluster('default', logger=logger)
    else:
        client = kubecall.Client.fake(logger=logger)
    async with client:
        for job in await client.list_jobs({'app': 'example'}):
            await suspend_job(client, job['metadata']['name'])


if __name__ == '__main__':
    asyncio.run(main())
