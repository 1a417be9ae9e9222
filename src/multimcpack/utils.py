from __future__ import annotations

import os,logging,random,hashlib,requests
from typing import *
from pathlib import Path
from requests.adapters import HTTPAdapter
from urllib3.util.retry import Retry

__all__ = [
    "logger_setup",
    "session_factory",
    "exponential_backoff",
    "sha1_sum",
    "sha1_bytes",
]

DEFAULT_USER_AGENT = "multimcpack/0.1"
LOG_FORMAT = "%(asctime)s %(name)s %(levelname)s: %(message)s"

def logger_setup(name:str="multimcpack",
                 level:int=logging.INFO,
                 *,
                 log_to_file:Optional[Union[str,os.PathLike]]=None,
                 file_level:Optional[int]=None,
                 fmt:str=LOG_FORMAT,
                 datefmt:str="%Y-%m-%d %H:%M:%S")->logging.Logger:
    """
    Attach console (and optionally file) handlers to logger `name`.

    The package itself only ever calls ``logging.getLogger(__name__)``; this is
    for applications that want install progress printed without configuring
    logging themselves. Calling it again for the same name adds no handlers.

    Parameters
    ----------
    name : str
        Logger to configure; the package root by default.
    level : int
        Console threshold.
    log_to_file : Optional[PathLike]
        Also append records to this file.
    file_level : Optional[int]
        File threshold, `level` when None.

    Example
    -------
    >>> log = logger_setup(level=logging.DEBUG, log_to_file="install.log")
    >>> install_modpack("pack.zip")  # phase changes and copied files are logged
    """
    log=logging.getLogger(name)
    log.setLevel(min(level,file_level if file_level is not None else level))
    if getattr(log,"_multimcpack_setup_done",False):
        return log

    formatter=logging.Formatter(fmt=fmt,datefmt=datefmt)
    console=logging.StreamHandler()
    console.setLevel(level)
    console.setFormatter(formatter)
    log.addHandler(console)
    if log_to_file:
        fh=logging.FileHandler(log_to_file,encoding="utf-8")
        fh.setLevel(file_level if file_level is not None else level)
        fh.setFormatter(formatter)
        log.addHandler(fh)
    log._multimcpack_setup_done=True
    return log

def session_factory(user_agent:Optional[str]=None,
                    *,
                    pool_maxsize:int=10,
                    max_retries:int=3,
                    backoff_factor:float=0.5,
                    status_forcelist:Iterable[int]=(429,500,502,503,504),
                    headers:Optional[Dict[str,str]]=None)->requests.Session:
    """
    Session used for library downloads.

    GET/HEAD requests are retried by urllib3 on connection errors and on
    `status_forcelist` statuses (``max_retries=0`` turns that off); the final
    response is returned instead of raising, so callers see its status code.
    Connections are pooled per host, which matters since most libraries come
    from the same few maven repositories.
    """
    session=requests.Session()
    session.headers["User-Agent"]=user_agent or DEFAULT_USER_AGENT
    if headers:
        session.headers.update(headers)

    retry=None
    if max_retries>0:
        retry=Retry(total=max_retries,
                    backoff_factor=backoff_factor,
                    status_forcelist=tuple(status_forcelist),
                    allowed_methods=frozenset({"GET","HEAD"}),
                    raise_on_status=False)
    adapter=HTTPAdapter(max_retries=retry if retry is not None else 0,pool_connections=pool_maxsize,pool_maxsize=pool_maxsize)
    for prefix in ("https://","http://"):
        session.mount(prefix,adapter)
    return session

def exponential_backoff(attempt:int,base:float=0.5,factor:float=2.0,max_interval:float=30.0)->float:
    """
    Seconds to sleep before retry number `attempt` (1-based).

    ``base * factor ** (attempt - 1)`` capped at `max_interval`, with +/-10% jitter
    so parallel downloads failing together do not retry in lockstep.

    Raises
    ------
    ValueError
        If `attempt` < 1, `base` is negative or `factor`/`max_interval` are not positive.
    """
    if attempt<1:
        raise ValueError("attempt must be >= 1")
    if base<0 or factor<=0 or max_interval<=0:
        raise ValueError("base must be >= 0, factor and max_interval > 0")
    delay=min(base*factor**(attempt-1),max_interval)
    delay+=delay*0.1*(2*random.random()-1)
    return round(max(0.0,delay),4)

def sha1_sum(path:Union[str,os.PathLike],chunk_size:int=1<<16)->str:
    """SHA-1 hex digest of a file on disk, read in chunks."""
    digest=hashlib.sha1()
    with open(Path(path),"rb") as f:
        for chunk in iter(lambda:f.read(chunk_size),b""):
            digest.update(chunk)
    return digest.hexdigest()

def sha1_bytes(data:bytes)->str:
    """SHA-1 hex digest of an in-memory payload, e.g. an archive entry."""
    return hashlib.sha1(data).hexdigest()
